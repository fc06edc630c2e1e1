"""Loading of the sales CSV file into the customer, product and order collections."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, Sequence

from bson import ObjectId

from .logger import LOGGER_NAME
from .models import (
    CSVRow,
    Customer,
    Order,
    Product,
    compute_total,
    parse_sale_date,
    read_csv_rows,
)
from .repo import bulk_insert_customers, bulk_insert_orders, bulk_insert_products

DEFAULT_CSV_PATH = "sample.csv"
BATCH_SIZE = 100

_log = logging.getLogger(LOGGER_NAME)


@dataclass
class LoadResult:
    """Customers, products and orders built from CSV rows."""

    customers: list[Customer] = field(default_factory=list)
    products: list[Product] = field(default_factory=list)
    orders: list[Order] = field(default_factory=list)

    def extend(self, other: "LoadResult") -> None:
        self.customers.extend(other.customers)
        self.products.extend(other.products)
        self.orders.extend(other.orders)


def build_records(rows: Sequence[CSVRow], batch_size=BATCH_SIZE) -> Iterator[LoadResult]:
    """Yield, per batch of rows, the new customers and products and every order."""
    if batch_size <= 0:
        raise ValueError("batch size must be positive")
    customer_ids: dict[str, ObjectId] = {}
    product_ids: dict[str, ObjectId] = {}

    for start in range(0, len(rows), batch_size):
        batch = LoadResult()
        for row in rows[start:start + batch_size]:
            customer_oid = customer_ids.get(row.customer_id)
            if customer_oid is None:
                customer = Customer(
                    customer_id=row.customer_id,
                    name=row.customer_name,
                    email=row.customer_email,
                    address=row.customer_address,
                )
                customer_oid = customer_ids[row.customer_id] = customer.id
                batch.customers.append(customer)

            product_oid = product_ids.get(row.product_id)
            if product_oid is None:
                product = Product(
                    product_id=row.product_id,
                    name=row.product_name,
                    category=row.category,
                )
                product_oid = product_ids[row.product_id] = product.id
                batch.products.append(product)

            batch.orders.append(
                Order(
                    order_id=row.order_id,
                    customer_id=customer_oid,
                    product_id=product_oid,
                    region=row.region,
                    date_of_sale=parse_sale_date(row.date_of_sale),
                    quantity_sold=row.quantity_sold,
                    unit_price=row.unit_price,
                    discount=row.discount,
                    shipping_cost=row.shipping_cost,
                    payment_method=row.payment_method,
                    total_amount=compute_total(
                        row.quantity_sold, row.unit_price, row.discount, row.shipping_cost
                    ),
                )
            )
        yield batch


def load_sales_data(db, path=DEFAULT_CSV_PATH, batch_size=BATCH_SIZE):
    """Read the sales CSV and upsert its records batch by batch; return everything built."""
    with open(path, newline="", encoding="utf-8-sig") as handle:
        rows = read_csv_rows(handle)

    loaded = LoadResult()
    for batch in build_records(rows, batch_size):
        bulk_insert_customers(db.customers, batch.customers)
        bulk_insert_products(db.products, batch.products)
        bulk_insert_orders(db.orders, batch.orders)
        loaded.extend(batch)
    _log.info(
        "Sales data loaded",
        extra={
            "fields": {
                "customers": len(loaded.customers),
                "products": len(loaded.products),
                "orders": len(loaded.orders),
            }
        },
    )
    return loaded