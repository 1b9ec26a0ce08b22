import pytest

from herbcey.core.errors import FormatError, NetworkError
from herbcey.processing.csv_parser import parse_csv_text, to_payment_records, validate_csv_format, PaymentRecord
from herbcey.processing.reconciliation import reconcile, NOT_FOUND, UPDATED, ERROR
from herbcey.services.failed_tracking import get_failed_trackings
from herbcey.services.payments import update_payments_from_csv, check_upload
from herbcey.utils.constants import ORDER_FIELDNAMES

from conftest import order_row

HEADER = "Waybill ID,Order ID,Weight (kg),Client,Delivery Status,Amount"


def _csv(*waybills):
    lines = [HEADER] + [f"{w},ORD{i},0.5,HerbCey,Delivered,2650" for i, w in enumerate(waybills)]
    return "\n".join(lines)


def _sheet(*rows):
    return [ORDER_FIELDNAMES] + [[str(v) for v in row] for row in rows]


class TestCsvParser:
    def test_parses_records_keyed_by_header(self):
        records = parse_csv_text(_csv("LK100"))
        assert records == [{
            "Waybill ID": "LK100",
            "Order ID": "ORD0",
            "Weight (kg)": "0.5",
            "Client": "HerbCey",
            "Delivery Status": "Delivered",
            "Amount": "2650",
        }]

    def test_strips_quotes_and_skips_blank_lines(self):
        records = parse_csv_text('"Waybill ID","Order ID"\n"LK1","A"\n\n')
        assert records == [{"Waybill ID": "LK1", "Order ID": "A"}]

    def test_missing_trailing_values_are_empty(self):
        records = parse_csv_text("Waybill ID,Order ID,Amount\nLK1")
        assert records[0]["Order ID"] == ""
        assert records[0]["Amount"] == ""

    def test_single_line_is_rejected(self):
        with pytest.raises(FormatError):
            parse_csv_text("Waybill ID,Order ID")

    def test_header_only_gives_no_records(self):
        assert parse_csv_text("Waybill ID,Order ID\n") == []

    def test_records_keep_unmapped_columns(self):
        record = to_payment_records(parse_csv_text(_csv("LK7")))[0]
        assert record.waybill_id == "LK7"
        assert record.amount == "2650"
        assert record.extra == {"Weight (kg)": "0.5", "Client": "HerbCey"}

    def test_validate_requires_both_headers(self):
        assert validate_csv_format("payments.csv", "Waybill ID,Order ID\nLK1,1")
        assert not validate_csv_format("payments.csv", "Waybill ID,Amount\nLK1,100")
        assert not validate_csv_format("payments.txt", "Waybill ID,Order ID\nLK1,1")

    def test_validate_accepts_bytes(self):
        assert validate_csv_format("PAYMENTS.CSV", b"Waybill ID,Order ID\n")

    def test_check_upload_raises(self):
        with pytest.raises(FormatError):
            check_upload("payments.csv", "Tracking,Amount\n")


class TestReconcile:
    def _run(self, records, rows, mark_paid=None):
        calls = []
        sleeps = []

        def default_mark(index):
            calls.append(index)
            return True

        result = reconcile(records, rows, mark_paid or default_mark, delay=0, sleep=sleeps.append)
        return result, calls, sleeps

    def test_empty_records(self):
        result, calls, _ = self._run([], _sheet(order_row("LK1")))
        assert result.processed == 0
        assert result.updated == 0
        assert result.errors == []
        assert result.success is True
        assert calls == []

    def test_unknown_waybill_is_not_found(self):
        result, calls, _ = self._run([PaymentRecord("LK1")], _sheet(order_row("LK2")))
        assert [(d.waybill_id, d.status) for d in result.details] == [("LK1", NOT_FOUND)]
        assert result.updated == 0
        assert calls == []

    def test_already_paid_reports_updated_without_writing(self):
        result, calls, sleeps = self._run([PaymentRecord("LK1")], _sheet(order_row("LK1", paid="Yes")))
        assert result.details[0].status == UPDATED
        assert result.details[0].message == "Payment already marked as received"
        assert result.updated == 0
        assert calls == []
        assert sleeps == []

    def test_match_is_trimmed(self):
        result, calls, _ = self._run([PaymentRecord(" LK1 ")], _sheet(order_row("LK0"), order_row("LK1 ")))
        assert result.updated == 1
        assert calls == [2]

    def test_missing_waybill_is_reported_as_unknown(self):
        result, calls, _ = self._run([PaymentRecord("")], _sheet(order_row("LK1")))
        assert result.details[0].waybill_id == "Unknown"
        assert result.details[0].status == ERROR
        assert calls == []

    def test_rejected_write_is_an_error_detail(self):
        result, _, sleeps = self._run([PaymentRecord("LK1")], _sheet(order_row("LK1")), mark_paid=lambda i: False)
        assert result.details[0].status == ERROR
        assert result.updated == 0
        assert result.errors == []
        assert result.success is True
        assert len(sleeps) == 1

    def test_exception_lands_in_errors(self):
        def boom(index):
            raise NetworkError("connection reset")

        result, _, _ = self._run([PaymentRecord("LK1")], _sheet(order_row("LK1")), mark_paid=boom)
        assert result.errors == ["Error processing LK1: connection reset"]
        assert result.details[0].status == ERROR
        assert result.success is False

    def test_first_duplicate_wins(self):
        result, calls, _ = self._run([PaymentRecord("LK1")], _sheet(order_row("LK1"), order_row("LK1")))
        assert calls == [1]


class TestUpdatePaymentsFromCsv:
    def test_scenario_one_found_one_missing(self, client, spreadsheet):
        spreadsheet.tabs["Orders"] += [order_row("LK100", paid="No")]

        result = update_payments_from_csv(client, _csv("LK100", "LK200"), sleep=lambda _: None)

        assert result.processed == 2
        assert result.updated == 1
        assert [(d.waybill_id, d.status) for d in result.details] == [
            ("LK100", UPDATED),
            ("LK200", NOT_FOUND),
        ]
        assert spreadsheet.tabs["Orders"][1][8] == "Yes"
        ledger = get_failed_trackings(client).data
        assert len(ledger) == 1
        assert ledger[0].tracking_id == "LK200"
        assert ledger[0].reason == "Order not found in system"
        assert ledger[0].status == "Failed"

    def test_writes_only_column_i(self, client, spreadsheet):
        spreadsheet.tabs["Orders"] += [order_row("LK100")]
        update_payments_from_csv(client, _csv("LK100"), sleep=lambda _: None)
        order_writes = [rng for kind, rng, _ in spreadsheet.writes if rng and rng.startswith("Orders")]
        assert order_writes == ["Orders!I2"]

    def test_duplicate_missing_waybills_share_one_ledger_row(self, client, spreadsheet):
        spreadsheet.tabs["Orders"] += [order_row("LK100")]
        update_payments_from_csv(client, _csv("LK300", "LK300"), sleep=lambda _: None)

        ledger = get_failed_trackings(client).data
        assert len(ledger) == 1
        assert ledger[0].attempt_count == 2

    def test_http_rejection_is_recorded_as_update_failed(self, client, spreadsheet):
        spreadsheet.tabs["Orders"] += [order_row("LK100")]
        spreadsheet.fail_writes["Orders!I"] = 403

        result = update_payments_from_csv(client, _csv("LK100"), sleep=lambda _: None)

        assert result.updated == 0
        assert result.details[0].status == ERROR
        ledger = get_failed_trackings(client).data
        assert ledger[0].reason == "Update failed"
        assert ledger[0].error_details == "Failed to update payment status"

    def test_no_records(self, client):
        result = update_payments_from_csv(client, HEADER + "\n")
        assert result.errors == ["No records found in CSV file"]
        assert result.success is False

    def test_no_orders(self, client):
        result = update_payments_from_csv(client, _csv("LK100"))
        assert result.errors == ["No orders found in Google Sheets"]

    def test_requires_token(self, read_only_client, spreadsheet):
        spreadsheet.tabs["Orders"] += [order_row("LK100")]
        result = update_payments_from_csv(read_only_client, _csv("LK100"))
        assert result.success is False
        assert "sign in" in result.errors[0]
        assert spreadsheet.writes == []
