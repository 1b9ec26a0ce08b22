from herbcey.core.models import ProductCost, Expense
from herbcey.services import products as product_service
from herbcey.services import expenses as expense_service
from herbcey.services.branches import get_branches


def test_product_crud(client, spreadsheet):
    added = product_service.add_product(client, ProductCost(id="", name="Oil", cost=300, price=950)).data
    assert added.id.startswith("PRD_")
    assert added.last_updated

    added.cost = 320
    assert product_service.update_product(client, added.id, added).success
    assert product_service.get_all_products(client).data[0].cost == 320

    assert product_service.delete_product(client, added.id).success
    assert product_service.get_all_products(client).data == []


def test_missing_product(client):
    response = product_service.update_product(client, "PRD_x", ProductCost(id="", name="x", cost=1, price=1))
    assert response.status_code == 404


def test_sync_products_overwrites_sheet(client, spreadsheet):
    products = [
        ProductCost(id="PRD_1", name="Oil", cost=300, price=950),
        ProductCost(id="PRD_2", name="Serum", cost=700, price=1600),
    ]
    product_service.sync_all_products(client, products)
    assert [p.name for p in product_service.get_all_products(client).data] == ["Oil", "Serum"]


def test_expense_crud_and_summary(client):
    added = expense_service.add_expense(client, Expense(id="", type="Oil", amount=1200, date="2025-03-02")).data
    assert added.id.startswith("EXP_")
    assert added.timestamp

    added.note = "Coconut oil drum"
    expense_service.update_expense(client, added.id, added)
    stored = expense_service.get_all_expenses(client).data[0]
    assert stored.note == "Coconut oil drum"
    assert stored.amount == 1200

    summary = expense_service.get_expense_summary(client, "2025-03-01", "2025-03-31").data
    assert summary["total_expenses"] == 1200

    assert expense_service.delete_expense(client, added.id).success
    assert expense_service.get_all_expenses(client).data == []


def test_branch_search(client, spreadsheet):
    spreadsheet.tabs["BranchNumbers"] += [
        ["1", "Kandy", "0812222222", "", "", "Closed on Sunday"],
        ["", "", "", "", "", ""],
        ["3", "Galle", "0912222222"],
    ]
    assert [b.branch for b in get_branches(client).data] == ["Kandy", "Galle"]
    assert [b.branch for b in get_branches(client, "0912").data] == ["Galle"]
    assert [b.branch for b in get_branches(client, "sunday").data] == ["Kandy"]
