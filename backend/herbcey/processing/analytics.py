"""
Sales, payment-collection, expense and profit analytics built on pandas.

Revenue per order is the catalogue value of its products; when shipping was
free the shipping cost is absorbed by the seller and subtracted. Damaged and
returned orders are left out of the sales figures.
"""
import logging
from dataclasses import asdict
from typing import Any, Dict, List, Optional

import pandas as pd

from herbcey.core.models import Expense, ProductCost, SheetOrder
from herbcey.utils.config import SHIPPING_COST
from herbcey.utils.constants import PRODUCT_PRICES, PRODUCT_QTY_COLUMNS
from herbcey.utils.dates import is_in_range, month_key

logger = logging.getLogger(__name__)

EXCLUDED_STATUSES = ["Damaged", "Return", "Returned"]

PERIOD_FORMATS = {
    "daily": "%Y-%m-%d",
    "monthly": "%Y-%m",
    "yearly": "%Y",
}

PRODUCT_NAMES = list(PRODUCT_QTY_COLUMNS.keys())

ORDER_FRAME_COLUMNS = [
    "tracking_id",
    "order_date",
    "status",
    "payment_method",
    "payment_received",
    "free_shipping",
    "revenue",
] + PRODUCT_NAMES


def order_revenue(order: SheetOrder) -> float:
    subtotal = sum(qty * PRODUCT_PRICES.get(name, 0) for name, qty in order.quantities().items())
    return float(subtotal - SHIPPING_COST if order.free_shipping else subtotal)


def orders_frame(orders: List[SheetOrder]) -> pd.DataFrame:
    """One row per order with typed columns and a parsed `date` column (NaT when unparseable)."""
    records = []
    for order in orders:
        record = {
            "tracking_id": order.tracking_id,
            "order_date": order.order_date,
            "status": order.order_status,
            "payment_method": order.payment_method,
            "payment_received": order.payment_received,
            "free_shipping": order.free_shipping,
            "revenue": order_revenue(order),
        }
        record.update(order.quantities())
        records.append(record)

    df = pd.DataFrame(records, columns=ORDER_FRAME_COLUMNS)
    df = df.astype({
        "payment_received": bool,
        "free_shipping": bool,
        "revenue": float,
        **{name: int for name in PRODUCT_NAMES},
    })
    df["date"] = pd.to_datetime(
        df["order_date"].astype(str).str.slice(0, 10),
        format="%Y-%m-%d",
        errors="coerce",
    )
    return df


def filter_frame(
    df: pd.DataFrame,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    product: Optional[str] = None,
) -> pd.DataFrame:
    if start_date:
        df = df[df["date"] >= pd.Timestamp(start_date[:10])]
    if end_date:
        df = df[df["date"] <= pd.Timestamp(end_date[:10])]
    if product and product != "all" and product in PRODUCT_NAMES:
        df = df[df[product] > 0]
    return df


def _time_series(sales: pd.DataFrame, period: str) -> List[Dict[str, Any]]:
    fmt = PERIOD_FORMATS.get(period, PERIOD_FORMATS["monthly"])
    dated = sales.dropna(subset=["date"])
    if dated.empty:
        return []
    keys = dated["date"].dt.strftime(fmt).rename("bucket")
    grouped = (
        dated.groupby(keys)
        .agg(revenue=("revenue", "sum"), orders=("tracking_id", "count"))
        .reset_index()
        .sort_values("bucket")
    )
    return [
        {"date": row.bucket, "revenue": float(row.revenue), "orders": int(row.orders)}
        for row in grouped.itertuples(index=False)
    ]


def compute_sales_analytics(
    orders: List[SheetOrder],
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    product: Optional[str] = None,
    period: str = "monthly",
) -> Dict[str, Any]:
    """
    Aggregate KPIs for the analytics page.

    Returns:
        Dict with revenue totals, received funds per payment method, units
        sold, order count, per-product sales, a revenue time series, payment
        method breakdown and a status breakdown.
    """
    df = filter_frame(orders_frame(orders), start_date, end_date, product)
    status_breakdown = {str(k): int(v) for k, v in df["status"].value_counts().items()}

    sales = df[~df["status"].isin(EXCLUDED_STATUSES)]
    received = sales[sales["payment_received"]]
    cod_received = float(received.loc[received["payment_method"] == "COD", "revenue"].sum())
    bank_received = float(received.loc[received["payment_method"] == "Bank Transfer", "revenue"].sum())
    total_revenue = float(sales["revenue"].sum())

    product_sales = {}
    for name in PRODUCT_NAMES:
        quantity = int(sales[name].sum())
        if quantity:
            product_sales[name] = {
                "quantity": quantity,
                "revenue": float(quantity * PRODUCT_PRICES.get(name, 0)),
            }

    payment_methods = {}
    if not sales.empty:
        by_method = sales.groupby("payment_method").agg(
            count=("tracking_id", "count"), revenue=("revenue", "sum")
        )
        payment_methods = {
            str(method): {"count": int(row["count"]), "revenue": float(row["revenue"])}
            for method, row in by_method.iterrows()
        }

    received_funds = cod_received + bank_received
    return {
        "total_revenue": total_revenue,
        "total_received_funds": received_funds,
        "cod_received": cod_received,
        "bank_transfer_received": bank_received,
        "pending_funds": total_revenue - received_funds,
        "collection_rate": round(received_funds / total_revenue * 100, 1) if total_revenue else 0.0,
        "total_units_sold": int(sales[PRODUCT_NAMES].to_numpy().sum()) if not sales.empty else 0,
        "total_orders": int(len(sales)),
        "product_sales": product_sales,
        "time_series": _time_series(sales, period),
        "payment_methods": payment_methods,
        "status_breakdown": status_breakdown,
    }


def summarize_expenses(
    expenses: List[Expense],
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> Dict[str, Any]:
    """Total, per-type and per-month expense sums. Missing bounds are open."""
    selected = [e for e in expenses if is_in_range(e.date, start_date, end_date)]
    if not selected:
        return {"total_expenses": 0.0, "expenses_by_type": {}, "monthly_expenses": {}}

    df = pd.DataFrame([asdict(e) for e in selected])
    df["amount"] = df["amount"].astype(float)
    df["month"] = df["date"].map(month_key)
    return {
        "total_expenses": float(df["amount"].sum()),
        "expenses_by_type": {str(k): float(v) for k, v in df.groupby("type")["amount"].sum().items()},
        "monthly_expenses": {str(k): float(v) for k, v in df.groupby("month")["amount"].sum().items()},
    }


def compute_profit(
    sales: Dict[str, Any],
    expense_summary: Dict[str, Any],
    products: List[ProductCost],
) -> Dict[str, Any]:
    """
    Profit figures combining sales analytics with catalogue costs and expenses.

    Net profit is cash collected minus recorded expenses. Gross profit uses
    catalogue cost for products that have one.
    """
    costs = {p.name.strip().lower(): p.cost for p in products}
    cost_of_goods = 0.0
    missing = []
    for name, figures in sales.get("product_sales", {}).items():
        cost = costs.get(name.lower())
        if cost is None:
            missing.append(name)
            continue
        cost_of_goods += figures["quantity"] * cost
    if missing:
        logger.info(f"No catalogue cost for {', '.join(missing)}; excluded from cost of goods")

    total_expenses = float(expense_summary.get("total_expenses", 0.0))
    return {
        "total_revenue": sales.get("total_revenue", 0.0),
        "total_received_funds": sales.get("total_received_funds", 0.0),
        "cost_of_goods": cost_of_goods,
        "gross_profit": sales.get("total_revenue", 0.0) - cost_of_goods,
        "total_expenses": total_expenses,
        "net_profit": sales.get("total_received_funds", 0.0) - total_expenses,
        "products_without_cost": missing,
    }
