from pydantic import BaseModel
from typing import Optional, Dict, List, Any

from herbcey.core.models import Order, ProductLine, ProductCost, StockItem, Expense, FailedTracking


class ApiResponse(BaseModel):
    success: bool
    error: Optional[str] = None
    data: Optional[Any] = None
    status_code: Optional[int] = None  # set for errors the API should surface as HTTP errors


class ProductLineIn(BaseModel):
    name: str
    quantity: int
    price: Optional[float] = None  # catalogue price when omitted


class OrderIn(BaseModel):
    name: str
    address_line1: str
    address_line2: str = ""
    address_line3: str = ""
    contact: str
    products: List[ProductLineIn]
    status: str = "Preparing"
    order_date: Optional[str] = None
    payment_method: str = "COD"
    payment_received: bool = False
    tracking: Optional[str] = None
    free_shipping: bool = False
    main_city: str = ""

    def to_model(self) -> Order:
        return Order(
            name=self.name,
            address_line1=self.address_line1,
            address_line2=self.address_line2,
            address_line3=self.address_line3,
            contact=self.contact,
            products=[ProductLine(p.name, p.quantity, p.price) for p in self.products],
            status=self.status,
            order_date=self.order_date or "",
            payment_method=self.payment_method,
            payment_received=self.payment_received,
            tracking=self.tracking or None,
            free_shipping=self.free_shipping,
            main_city=self.main_city,
        )


class FdeWaybillUpdate(BaseModel):
    waybill: str


class ProductIn(BaseModel):
    id: Optional[str] = None
    name: str
    cost: float
    price: float
    last_updated: Optional[str] = None

    def to_model(self) -> ProductCost:
        return ProductCost(
            id=self.id or "",
            name=self.name,
            cost=self.cost,
            price=self.price,
            last_updated=self.last_updated or "",
        )


class StockIn(BaseModel):
    id: Optional[str] = None
    product_name: str
    empty_stock: int = 0
    filled_stock: int = 0
    created_at: Optional[str] = None
    last_updated: Optional[str] = None
    last_restocked: Optional[str] = None
    restock_quantity: int = 0

    def to_model(self) -> StockItem:
        return StockItem(
            id=self.id or "",
            product_name=self.product_name,
            empty_stock=self.empty_stock,
            filled_stock=self.filled_stock,
            created_at=self.created_at or "",
            last_updated=self.last_updated or "",
            last_restocked=self.last_restocked or "",
            restock_quantity=self.restock_quantity,
        )


class QuantityRequest(BaseModel):
    quantity: int


class ExpenseIn(BaseModel):
    id: Optional[str] = None
    type: str
    amount: float
    note: str = ""
    date: str

    def to_model(self) -> Expense:
        return Expense(id=self.id or "", type=self.type, amount=self.amount, note=self.note, date=self.date)


class PaymentCsvUpload(BaseModel):
    filename: str
    content: str


class FailedTrackingIn(BaseModel):
    tracking_id: str
    reason: str
    error_details: Optional[str] = None


class FailedTrackingUpdate(BaseModel):
    tracking_id: str
    reason: str
    attempt_count: int
    first_failed: str
    last_attempt: str
    status: str
    error_details: str = ""

    def to_model(self, record_id: str) -> FailedTracking:
        return FailedTracking(id=record_id, **self.model_dump())


class WaybillLookup(BaseModel):
    waybill_ids: List[str]


class CityJobRequest(BaseModel):
    write_back: bool = False
