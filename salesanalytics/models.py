"""Sales records: CSV input rows and the stored customer, product and order documents."""

from __future__ import annotations

import csv
import re
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, ClassVar, Iterable

from bson import ObjectId

ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

_SALE_DATE = re.compile(r"([0-9]{2})-([0-9]{2})-([0-9]{4})")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_float(text: str) -> float:
    text = text.strip()
    try:
        return float(text) if text else 0.0
    except ValueError as exc:
        raise ValueError(f"invalid number {text!r}") from exc


def _parse_int(text: str) -> int:
    text = text.strip()
    try:
        return int(text) if text else 0
    except ValueError:
        try:
            return int(_parse_float(text))
        except OverflowError as exc:
            raise ValueError(f"invalid integer {text!r}") from exc
        except ValueError as exc:
            raise ValueError(f"invalid integer {text!r}") from exc


def _column(name: str, default: Any = "", parse=str):
    return field(default=default, metadata={"column": name, "parse": parse})


@dataclass
class CSVRow:
    """One line of the sales CSV file."""

    order_id: str = _column("Order ID")
    product_id: str = _column("Product ID")
    customer_id: str = _column("Customer ID")
    product_name: str = _column("Product Name")
    category: str = _column("Category")
    region: str = _column("Region")
    date_of_sale: str = _column("Date of Sale")
    quantity_sold: int = _column("Quantity Sold", 0, _parse_int)
    unit_price: float = _column("Unit Price", 0.0, _parse_float)
    discount: float = _column("Discount", 0.0, _parse_float)
    shipping_cost: float = _column("Shipping Cost", 0.0, _parse_float)
    payment_method: str = _column("Payment Method")
    customer_name: str = _column("Customer Name")
    customer_email: str = _column("Customer Email")
    customer_address: str = _column("Customer Address")

    @classmethod
    def from_record(cls, record):
        """Build a row from a mapping of CSV header names to cell text."""
        values = {}
        for item in fields(cls):
            column = item.metadata["column"]
            try:
                values[item.name] = item.metadata["parse"](record.get(column) or "")
            except ValueError as exc:
                raise ValueError(f"column {column!r}: {exc}") from exc
        return cls(**values)


def _document(instance) -> dict[str, Any]:
    body = {item.name: getattr(instance, item.name) for item in fields(instance) if item.name != "id"}
    return body if instance.id is None else {"_id": instance.id, **body}


@dataclass
class Customer:
    """A customer document."""

    collection_name: ClassVar[str] = "customers"

    customer_id: str
    name: str
    email: str
    address: str = ""
    id: ObjectId | None = field(default_factory=ObjectId)
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    def to_document(self):
        """Return the document as stored in the database."""
        return _document(self)


@dataclass
class Product:
    """A product document."""

    collection_name: ClassVar[str] = "products"

    product_id: str
    name: str
    category: str
    description: str = ""
    id: ObjectId | None = field(default_factory=ObjectId)
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    def to_document(self):
        """Return the document as stored in the database."""
        return _document(self)


@dataclass
class Order:
    """An order document referring to a customer and a product by object id."""

    collection_name: ClassVar[str] = "orders"

    order_id: str
    customer_id: ObjectId
    product_id: ObjectId
    region: str
    date_of_sale: datetime
    quantity_sold: int
    unit_price: float
    discount: float
    shipping_cost: float
    payment_method: str
    total_amount: float = 0.0
    id: ObjectId | None = field(default_factory=ObjectId)
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    def to_document(self):
        """Return the document as stored in the database."""
        return _document(self)


def compute_total(quantity, unit_price, discount, shipping_cost):
    """Order total: discounted line price plus shipping."""
    return float(quantity) * unit_price * (1.0 - discount) + shipping_cost


def parse_sale_date(text):
    """Parse a DD-MM-YYYY date as UTC; text that does not parse gives ZERO_TIME."""
    match = _SALE_DATE.fullmatch(text)
    if match is None:
        return ZERO_TIME
    day, month, year = (int(part) for part in match.groups())
    try:
        return datetime(year, month, day, tzinfo=timezone.utc)
    except ValueError:
        return ZERO_TIME


def read_csv_rows(stream: Iterable[str]) -> list[CSVRow]:
    """Read every row of a sales CSV with a header line."""
    reader = csv.DictReader(stream)
    if reader.fieldnames is None:
        raise ValueError("empty csv file given")
    return [CSVRow.from_record(record) for record in reader]