"""
Data models for orders, products, stock, expenses, failed trackings and branches.

Each sheet-backed model knows its positional row layout: ``to_row()`` builds
the list of scalars written to the sheet and ``from_row()`` rebuilds a
best-effort record from whatever the sheet returned.
"""
import re
from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional, Any

from herbcey.core.codec import (
    pad_row,
    cell_str,
    cell_int,
    cell_float,
    cell_yes,
    yes_no,
)
from herbcey.utils import config
from herbcey.utils.constants import (
    ORDER_FIELDNAMES,
    PRODUCT_FIELDNAMES,
    EXPENSE_FIELDNAMES,
    STOCK_FIELDNAMES,
    FAILED_TRACKING_FIELDNAMES,
    BRANCH_FIELDNAMES,
    PRODUCT_QTY_COLUMNS,
    PRODUCT_PRICES,
)
from herbcey.utils.dates import current_iso_date

_PHONE_SPLIT = re.compile(r"[\s,/]+")


def calculate_total(products: List["ProductLine"], free_shipping: bool = False) -> float:
    """Sum of quantity x unit price, plus shipping unless it is free."""
    subtotal = sum(p.price * p.quantity for p in products)
    return subtotal if free_shipping else subtotal + config.SHIPPING_COST


def _number(value: float):
    """Write whole numbers as ints so the sheet shows 2650, not 2650.0."""
    return int(value) if float(value).is_integer() else value


@dataclass
class ProductLine:
    """One product on an order, with the unit price captured at order time."""
    name: str
    quantity: int
    price: Optional[float] = None

    def __post_init__(self):
        if self.price is None:
            self.price = PRODUCT_PRICES.get(self.name, 0)


@dataclass
class Order:
    """An order as entered by the operator."""
    name: str
    address_line1: str
    contact: str
    products: List[ProductLine]
    status: str = "Preparing"
    order_date: str = ""
    payment_method: str = "COD"
    payment_received: bool = False
    tracking: Optional[str] = None
    free_shipping: bool = False
    address_line2: str = ""
    address_line3: str = ""
    main_city: str = ""
    fde_waybill: str = ""

    @property
    def total_amount(self) -> float:
        return calculate_total(self.products, self.free_shipping)

    @property
    def phone_numbers(self) -> List[str]:
        return [p for p in _PHONE_SPLIT.split(self.contact or "") if p]

    def quantities(self) -> Dict[str, int]:
        """Quantity per catalogue product; unknown product names are ignored."""
        qty = {name: 0 for name in PRODUCT_QTY_COLUMNS}
        for product in self.products:
            if product.name in qty:
                qty[product.name] += int(product.quantity)
        return qty

    def customer_info(self) -> str:
        address = ", ".join(
            part for part in (self.address_line1, self.address_line2, self.address_line3)
            if part and part.strip()
        )
        return f"{self.name}\n{address}\n{self.contact}"

    def to_row(self, last_updated: Optional[str] = None) -> List[Any]:
        """
        Columns A-Q of the Orders sheet.

        Column R (FDE waybill) is never produced here; only the dedicated
        FDE write path touches it.
        """
        qty = self.quantities()
        return [
            self.tracking or "",                      # A Tracking ID
            self.customer_info(),                     # B Customer Info
            qty["Oil"],                               # C
            qty["Shampoo"],                           # D
            qty["Conditioner"],                       # E
            _number(self.total_amount),               # F Total Amount
            self.status,                              # G
            self.payment_method,                      # H
            yes_no(self.payment_received),            # I
            yes_no(self.free_shipping),               # J
            self.order_date,                          # K
            last_updated or current_iso_date(),       # L Last Updated
            qty["Spray"],                             # M
            qty["Serum"],                             # N
            qty["Premium"],                           # O
            qty["Castor"],                            # P
            self.main_city or "",                     # Q Main City
        ]

    @classmethod
    def from_row(cls, row: List[Any]) -> "Order":
        """
        Rebuild an Order from an Orders sheet row.

        Address lines 2 and 3 were merged into Customer Info on write, so the
        whole address comes back in address_line1. Unit prices come from the
        catalogue price table because the sheet does not store them.
        """
        return SheetOrder.from_row(row).to_order()

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["total_amount"] = _number(self.total_amount)
        return data


@dataclass
class SheetOrder:
    """The denormalized Orders sheet row, columns A-R."""
    tracking_id: str
    customer_info: str
    oil_qty: int
    shampoo_qty: int
    conditioner_qty: int
    total_amount: float
    order_status: str
    payment_method: str
    payment_received: bool
    free_shipping: bool
    order_date: str
    last_updated: str
    spray_qty: int
    serum_qty: int
    premium_qty: int
    castor_qty: int
    main_city: str = ""
    fde_status: str = ""

    @classmethod
    def from_row(cls, row: List[Any]) -> "SheetOrder":
        r = pad_row(row, ORDER_FIELDNAMES)
        return cls(
            tracking_id=cell_str(r[0]),
            customer_info=cell_str(r[1]),
            oil_qty=cell_int(r[2]),
            shampoo_qty=cell_int(r[3]),
            conditioner_qty=cell_int(r[4]),
            total_amount=cell_float(r[5]),
            order_status=cell_str(r[6]),
            payment_method=cell_str(r[7]),
            payment_received=cell_yes(r[8]),
            free_shipping=cell_yes(r[9]),
            order_date=cell_str(r[10]),
            last_updated=cell_str(r[11]),
            spray_qty=cell_int(r[12]),
            serum_qty=cell_int(r[13]),
            premium_qty=cell_int(r[14]),
            castor_qty=cell_int(r[15]),
            main_city=cell_str(r[16]),
            fde_status=cell_str(r[17]),
        )

    def quantities(self) -> Dict[str, int]:
        return {
            "Oil": self.oil_qty,
            "Shampoo": self.shampoo_qty,
            "Conditioner": self.conditioner_qty,
            "Spray": self.spray_qty,
            "Serum": self.serum_qty,
            "Premium": self.premium_qty,
            "Castor": self.castor_qty,
        }

    def split_customer_info(self) -> Dict[str, str]:
        lines = self.customer_info.split("\n")
        name = lines[0] if lines else ""
        if len(lines) >= 3:
            address = ", ".join(line for line in lines[1:-1] if line.strip())
            contact = lines[-1]
        elif len(lines) == 2:
            address, contact = lines[1], ""
        else:
            address, contact = "", ""
        return {"name": name, "address": address, "contact": contact}

    def to_order(self) -> Order:
        info = self.split_customer_info()
        products = [
            ProductLine(name=name, quantity=qty)
            for name, qty in self.quantities().items()
            if qty > 0
        ]
        return Order(
            name=info["name"],
            address_line1=info["address"],
            contact=info["contact"],
            products=products,
            status=self.order_status,
            order_date=self.order_date,
            payment_method=self.payment_method,
            payment_received=self.payment_received,
            tracking=self.tracking_id,
            free_shipping=self.free_shipping,
            main_city=self.main_city,
            fde_waybill=self.fde_status,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data.update(self.split_customer_info())
        return data


@dataclass
class ProductCost:
    """Product catalogue entry used for cost and profit reporting."""
    id: str
    name: str
    cost: float
    price: float
    last_updated: str = ""

    def to_row(self) -> List[Any]:
        return [self.id, self.name, self.cost, self.price, self.last_updated]

    @classmethod
    def from_row(cls, row: List[Any]) -> "ProductCost":
        r = pad_row(row, PRODUCT_FIELDNAMES)
        return cls(
            id=cell_str(r[0]),
            name=cell_str(r[1]),
            cost=cell_float(r[2]),
            price=cell_float(r[3]),
            last_updated=cell_str(r[4]),
        )


@dataclass
class StockItem:
    """Two-stage inventory: empty (raw bottles) and filled (sellable units)."""
    id: str
    product_name: str
    empty_stock: int = 0
    filled_stock: int = 0
    created_at: str = ""
    last_updated: str = ""
    last_restocked: str = ""
    restock_quantity: int = 0

    def to_row(self) -> List[Any]:
        return [
            self.id,
            self.product_name,
            self.empty_stock,
            self.filled_stock,
            self.created_at,
            self.last_updated,
            self.last_restocked or "",
            self.restock_quantity or 0,
        ]

    @classmethod
    def from_row(cls, row: List[Any], index: int = 0) -> "StockItem":
        r = pad_row(row, STOCK_FIELDNAMES)
        return cls(
            id=cell_str(r[0]) or f"stock_{index}",
            product_name=cell_str(r[1]),
            empty_stock=cell_int(r[2]),
            filled_stock=cell_int(r[3]),
            created_at=cell_str(r[4]),
            last_updated=cell_str(r[5]),
            last_restocked=cell_str(r[6]),
            restock_quantity=cell_int(r[7]),
        )


@dataclass
class Expense:
    id: str
    type: str
    amount: float
    note: str = ""
    date: str = ""
    timestamp: str = ""

    def to_row(self, timestamp: Optional[str] = None) -> List[Any]:
        return [
            self.id,
            self.type,
            self.amount,
            self.note or "",
            self.date,
            timestamp or self.timestamp or current_iso_date(),
        ]

    @classmethod
    def from_row(cls, row: List[Any]) -> "Expense":
        r = pad_row(row, EXPENSE_FIELDNAMES)
        return cls(
            id=cell_str(r[0]),
            type=cell_str(r[1]),
            amount=cell_float(r[2]),
            note=cell_str(r[3]),
            date=cell_str(r[4]),
            timestamp=cell_str(r[5]),
        )


@dataclass
class FailedTracking:
    """A CSV payment record that could not be matched or written."""
    id: str
    tracking_id: str
    reason: str
    attempt_count: int = 1
    first_failed: str = ""
    last_attempt: str = ""
    status: str = "Failed"
    error_details: str = ""

    @property
    def is_open(self) -> bool:
        return self.status != "Resolved"

    def to_row(self) -> List[Any]:
        return [
            self.id,
            self.tracking_id,
            self.reason,
            self.attempt_count,
            self.first_failed,
            self.last_attempt,
            self.status,
            self.error_details or "",
        ]

    @classmethod
    def from_row(cls, row: List[Any]) -> "FailedTracking":
        r = pad_row(row, FAILED_TRACKING_FIELDNAMES)
        return cls(
            id=cell_str(r[0]),
            tracking_id=cell_str(r[1]),
            reason=cell_str(r[2]),
            attempt_count=cell_int(r[3]),
            first_failed=cell_str(r[4]),
            last_attempt=cell_str(r[5]),
            status=cell_str(r[6]) or "Failed",
            error_details=cell_str(r[7]),
        )


@dataclass
class BranchContact:
    """Courier branch phone book entry (read-only)."""
    id: int
    branch: str
    contact_no1: str = ""
    contact_no2: str = ""
    contact_no3: str = ""
    additional_info: str = ""
    numbers: List[str] = field(default_factory=list)

    @classmethod
    def from_row(cls, row: List[Any], index: int = 0) -> "BranchContact":
        r = pad_row(row, BRANCH_FIELDNAMES)
        contacts = [cell_str(r[2]), cell_str(r[3]), cell_str(r[4])]
        return cls(
            id=cell_int(r[0]) or index + 1,
            branch=cell_str(r[1]),
            contact_no1=contacts[0],
            contact_no2=contacts[1],
            contact_no3=contacts[2],
            additional_info=cell_str(r[5]),
            numbers=[c for c in contacts if c],
        )
