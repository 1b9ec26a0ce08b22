import pytest

from herbcey.core.codec import pad_row, cell_int, cell_float, cell_yes, column_letter
from herbcey.core.errors import FormatError
from herbcey.core.models import (
    Order,
    ProductLine,
    SheetOrder,
    StockItem,
    FailedTracking,
    BranchContact,
    calculate_total,
)
from herbcey.schemas import OrderIn
from herbcey.utils.constants import ORDER_FIELDNAMES


def _order(**overrides):
    fields = dict(
        name="Kamala Silva",
        address_line1="45 Lake Road",
        contact="0711111111/0722222222",
        products=[ProductLine("Oil", 2), ProductLine("Serum", 1)],
        status="Shipped",
        order_date="2025-02-01 09:30:00",
        payment_method="COD",
        payment_received=True,
        tracking="LK123",
        free_shipping=False,
        main_city="Galle",
    )
    fields.update(overrides)
    return Order(**fields)


class TestCodec:
    def test_pad_row_fills_missing_cells(self):
        assert pad_row(["a"], ["x", "y", "z"]) == ["a", "", ""]

    def test_pad_row_drops_extra_cells_when_lenient(self):
        assert pad_row(["a", "b", "c"], ["x", "y"], strict=False) == ["a", "b"]

    def test_pad_row_raises_on_wide_row_when_strict(self):
        with pytest.raises(FormatError):
            pad_row(["a", "b", "c"], ["x", "y"], strict=True)

    def test_cell_parsers_fall_back_to_defaults(self):
        assert cell_int("12abc") == 12
        assert cell_int("x") == 0
        assert cell_float("1,350.50") == 1350.5
        assert cell_float("") == 0.0

    def test_yes_is_case_sensitive(self):
        assert cell_yes("Yes")
        assert not cell_yes("yes")
        assert not cell_yes("")

    def test_column_letter(self):
        assert column_letter(0) == "A"
        assert column_letter(17) == "R"
        assert column_letter(26) == "AA"


class TestOrderCodec:
    def test_total_uses_catalogue_prices(self):
        assert calculate_total([ProductLine("Oil", 2), ProductLine("Serum", 1)]) == 950 * 2 + 1600 + 350

    def test_free_shipping_drops_shipping_cost(self):
        assert calculate_total([ProductLine("Oil", 1)], free_shipping=True) == 950

    def test_to_row_layout(self):
        row = _order().to_row(last_updated="2025-02-02")
        assert len(row) == 17
        assert row[0] == "LK123"
        assert row[1] == "Kamala Silva\n45 Lake Road\n0711111111/0722222222"
        assert row[2] == 2
        assert row[5] == 3850
        assert row[8] == "Yes"
        assert row[9] == "No"
        assert row[11] == "2025-02-02"
        assert row[13] == 1
        assert row[16] == "Galle"

    def test_round_trip_preserves_row_fields(self):
        order = _order()
        restored = Order.from_row(order.to_row(last_updated="2025-02-02"))
        assert restored.name == order.name
        assert restored.address_line1 == order.address_line1
        assert restored.contact == order.contact
        assert restored.status == order.status
        assert restored.order_date == order.order_date
        assert restored.payment_method == order.payment_method
        assert restored.payment_received is True
        assert restored.free_shipping is False
        assert restored.tracking == "LK123"
        assert restored.main_city == "Galle"
        assert restored.quantities() == order.quantities()
        assert restored.total_amount == order.total_amount

    def test_address_lines_merge_and_do_not_split_back(self):
        order = _order(address_line2="Near the bus stand", address_line3="Matara")
        restored = Order.from_row(order.to_row())
        assert restored.address_line1 == "45 Lake Road, Near the bus stand, Matara"
        assert restored.address_line2 == ""
        assert restored.address_line3 == ""

    def test_explicit_zero_price_is_kept(self):
        assert calculate_total([ProductLine("Oil", 1, price=0)]) == 350

    def test_order_payload_price_defaults_to_catalogue(self):
        payload = {"name": "Ruwan", "address_line1": "3 Station Road", "contact": "0705555555"}
        free = OrderIn(**payload, products=[{"name": "Oil", "quantity": 1, "price": 0}]).to_model()
        listed = OrderIn(**payload, products=[{"name": "Oil", "quantity": 1}]).to_model()
        assert free.products[0].price == 0
        assert listed.products[0].price == 950

    def test_custom_unit_price_is_not_stored(self):
        order = _order(products=[ProductLine("Oil", 1, price=800)])
        restored = Order.from_row(order.to_row())
        assert restored.products[0].price == 950

    def test_short_row_decodes_with_defaults(self):
        sheet_order = SheetOrder.from_row(["LK9", "Only Name"])
        assert sheet_order.tracking_id == "LK9"
        assert sheet_order.payment_received is False
        assert sheet_order.oil_qty == 0
        assert sheet_order.split_customer_info() == {"name": "Only Name", "address": "", "contact": ""}

    def test_two_line_customer_info_has_no_contact(self):
        info = SheetOrder.from_row(["LK9", "Name\nAddress"]).split_customer_info()
        assert info == {"name": "Name", "address": "Address", "contact": ""}

    def test_fde_column_is_decoded(self):
        row = [""] * len(ORDER_FIELDNAMES)
        row[0], row[17] = "LK5", "FDE777"
        assert SheetOrder.from_row(row).fde_status == "FDE777"

    def test_phone_numbers_split(self):
        assert _order(contact="0711111111 / 0722222222").phone_numbers == ["0711111111", "0722222222"]


class TestSheetModels:
    def test_stock_item_defaults_id_from_position(self):
        item = StockItem.from_row(["", "Oil", "4", "2"], index=3)
        assert item.id == "stock_3"
        assert item.empty_stock == 4
        assert item.filled_stock == 2

    def test_failed_tracking_status_defaults_to_failed(self):
        record = FailedTracking.from_row(["FT_1", "LK1", "Order not found in system", "1"])
        assert record.status == "Failed"
        assert record.is_open

    def test_resolved_record_is_closed(self):
        record = FailedTracking(id="FT_1", tracking_id="LK1", reason="x", status="Resolved")
        assert not record.is_open

    def test_branch_numbers_skip_blanks(self):
        branch = BranchContact.from_row(["", "Kandy", "0812222222", "", "0813333333"], index=4)
        assert branch.id == 5
        assert branch.numbers == ["0812222222", "0813333333"]
