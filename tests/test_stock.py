from herbcey.core.models import StockItem
from herbcey.services import stock as stock_service


def _item(client, product):
    return next(i for i in stock_service.read_stock(client) if i.product_name == product)


def test_fill_moves_empty_to_filled(client):
    response = stock_service.fill_bottles(client, "Oil", 4)
    assert response.success
    item = _item(client, "Oil")
    assert item.empty_stock == 6
    assert item.filled_stock == 9


def test_fill_more_than_empty_is_an_error(client, spreadsheet):
    response = stock_service.fill_bottles(client, "Oil", 11)
    assert not response.success
    assert response.status_code == 400
    assert "only 10 empty" in response.error
    assert _item(client, "Oil").empty_stock == 10
    assert spreadsheet.writes == []


def test_fill_rejects_non_positive_quantity(client):
    assert stock_service.fill_bottles(client, "Oil", 0).status_code == 400


def test_fill_unknown_product(client):
    assert stock_service.fill_bottles(client, "Henna", 1).status_code == 404


def test_restock_records_quantity(client):
    stock_service.restock_empty(client, "shampoo", 20)
    item = _item(client, "Shampoo")
    assert item.empty_stock == 30
    assert item.restock_quantity == 20
    assert item.last_restocked


def test_adjust_clamps_at_zero(client):
    warnings = stock_service.adjust_filled_stock(client, {"Oil": -8, "Shampoo": 2})
    assert _item(client, "Oil").filled_stock == 0
    assert _item(client, "Shampoo").filled_stock == 7
    assert warnings == ["Filled stock for Oil would go below zero; set to 0"]


def test_adjust_skips_products_without_stock_row(client):
    warnings = stock_service.adjust_filled_stock(client, {"Castor": -1})
    assert warnings == ["No stock row for Castor"]


def test_adjust_without_changes_does_not_touch_sheet(client, spreadsheet):
    assert stock_service.adjust_filled_stock(client, {"Oil": 0}) == []
    assert spreadsheet.writes == []


def test_mutations_rewrite_whole_sheet(client, spreadsheet):
    stock_service.fill_bottles(client, "Oil", 1)
    kind, rng, values = spreadsheet.writes[-1]
    assert rng == "Stock!A1"
    assert len(values) == 4


def test_add_and_update_stock(client):
    added = stock_service.add_stock(client, StockItem(id="", product_name="Serum", empty_stock=3)).data
    assert added.id.startswith("STK_")

    added.filled_stock = 2
    stock_service.update_stock(client, added.id, added)
    assert _item(client, "Serum").filled_stock == 2


def test_update_unknown_stock(client):
    response = stock_service.update_stock(client, "STK_none", StockItem(id="", product_name="x"))
    assert response.status_code == 404
