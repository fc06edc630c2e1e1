import io
from datetime import datetime, timezone

import pytest
from bson import ObjectId

from salesanalytics.models import (
    ZERO_TIME,
    CSVRow,
    Customer,
    Order,
    Product,
    compute_total,
    parse_sale_date,
    read_csv_rows,
)

HEADER = [
    "Order ID", "Product ID", "Customer ID", "Product Name", "Category", "Region",
    "Date of Sale", "Quantity Sold", "Unit Price", "Discount", "Shipping Cost",
    "Payment Method", "Customer Name", "Customer Email", "Customer Address",
]

VALUES = [
    "1001", "P123", "C456", "UltraBoost Shoes", "Shoes", "North America",
    "15-03-2024", "2", "180.00", "0.1", "10.00",
    "Credit Card", "Alice Example", "alice@example.com", "1 Example Street",
]


def record():
    return dict(zip(HEADER, VALUES))


def test_from_record_maps_columns():
    row = CSVRow.from_record(record())
    assert row.order_id == "1001"
    assert row.product_id == "P123"
    assert row.customer_email == "alice@example.com"
    assert row.customer_address == "1 Example Street"
    assert row.quantity_sold == 2
    assert row.unit_price == 180.0
    assert row.discount == 0.1
    assert row.shipping_cost == 10.0


def test_from_record_missing_columns_default():
    row = CSVRow.from_record({"Order ID": "7", "Quantity Sold": ""})
    assert row == CSVRow(order_id="7")


def test_from_record_rejects_bad_number():
    data = record()
    data["Unit Price"] = "cheap"
    with pytest.raises(ValueError, match="Unit Price"):
        CSVRow.from_record(data)


def test_read_csv_rows():
    text = ",".join(HEADER) + "\n" + ",".join(f'"{v}"' for v in VALUES) + "\n"
    text += ",".join(f'"{v}"' for v in VALUES[:7]) + ',"5",,,,,,,\n'
    rows = read_csv_rows(io.StringIO(text))
    assert len(rows) == 2
    assert rows[0] == CSVRow.from_record(record())
    assert rows[1].quantity_sold == 5
    assert rows[1].unit_price == 0.0


def test_read_csv_rows_empty_raises():
    with pytest.raises(ValueError):
        read_csv_rows(io.StringIO(""))


def test_compute_total_values():
    assert compute_total(0, 99.0, 0.3, 7.5) == 7.5
    assert compute_total(5, 10.0, 1.0, 2.5) == 2.5
    assert compute_total(4, 25.0, 0.0, 0.0) == 100.0


def test_compute_total_discount_lowers_total():
    assert compute_total(3, 20.0, 0.5, 1.0) < compute_total(3, 20.0, 0.1, 1.0)


def test_parse_sale_date():
    assert parse_sale_date("15-03-2024") == datetime(2024, 3, 15, tzinfo=timezone.utc)


@pytest.mark.parametrize("text", ["2024-03-15", "5-3-2024", "31-02-2024", ""])
def test_parse_sale_date_invalid_gives_zero_time(text):
    assert parse_sale_date(text) == ZERO_TIME


def test_collection_names():
    sale = datetime(2024, 3, 15, tzinfo=timezone.utc)
    customer = Customer("C456", "Alice Example", "alice@example.com")
    product = Product("P123", "UltraBoost Shoes", "Shoes")
    order = Order("1001", customer.id, product.id, "Asia", sale, 2, 180.0, 0.1, 10.0, "PayPal", 334.0)
    assert customer.collection_name == "customers"
    assert product.collection_name == "products"
    assert order.collection_name == "orders"


def test_customer_document():
    customer = Customer("C456", "Alice Example", "alice@example.com", "1 Example Street")
    doc = customer.to_document()
    assert doc["_id"] == customer.id
    assert set(doc) == {"_id", "customer_id", "name", "email", "address", "created_at", "updated_at"}
    assert doc["email"] == "alice@example.com"


def test_document_omits_missing_id():
    product = Product("P123", "UltraBoost Shoes", "Shoes", id=None)
    doc = product.to_document()
    assert "_id" not in doc
    assert doc["category"] == "Shoes"
    assert doc["description"] == ""


def test_order_document():
    customer_id, product_id = ObjectId(), ObjectId()
    sale = datetime(2024, 3, 15, tzinfo=timezone.utc)
    order = Order("1001", customer_id, product_id, "Asia", sale, 2, 180.0, 0.1, 10.0, "PayPal", 334.0)
    doc = order.to_document()
    assert doc["customer_id"] == customer_id
    assert doc["product_id"] == product_id
    assert doc["date_of_sale"] == sale
    assert doc["total_amount"] == 334.0
    assert doc["_id"] == order.id


def test_ids_are_unique():
    customers = [Customer("a", "b", "c") for _ in range(5)]
    ids = {customer.id for customer in customers}
    assert len(ids) == 5
    assert all(isinstance(object_id, ObjectId) for object_id in ids)
    assert [customer.to_document()["_id"] for customer in customers] == [c.id for c in customers]