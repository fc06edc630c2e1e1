from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from salesanalytics.dataloader import LoadResult, build_records, load_sales_data
from salesanalytics.models import ZERO_TIME, CSVRow, compute_total

HEADER = (
    "Order ID,Product ID,Customer ID,Product Name,Category,Region,Date of Sale,"
    "Quantity Sold,Unit Price,Discount,Shipping Cost,Payment Method,"
    "Customer Name,Customer Email,Customer Address"
)


def make_row(order_id, customer_id="C1", product_id="P1", date="15-03-2024"):
    return CSVRow(
        order_id=order_id,
        product_id=product_id,
        customer_id=customer_id,
        product_name="Lamp",
        category="Home",
        region="North",
        date_of_sale=date,
        quantity_sold=2,
        unit_price=10.0,
        discount=0.1,
        shipping_cost=5.0,
        payment_method="Card",
        customer_name="Ann",
        customer_email="ann@example.com",
        customer_address="1 Example Street",
    )


class FakeCollection:
    def __init__(self):
        self.writes = []

    def bulk_write(self, requests, ordered=True):
        requests = list(requests)
        self.writes.append(requests)
        return SimpleNamespace(
            inserted_count=0,
            matched_count=0,
            modified_count=0,
            deleted_count=0,
            upserted_count=len(requests),
            upserted_ids={},
        )


def fake_db():
    return SimpleNamespace(
        customers=FakeCollection(), products=FakeCollection(), orders=FakeCollection()
    )


def test_customers_and_products_are_deduplicated():
    rows = [make_row("O1"), make_row("O2"), make_row("O3", customer_id="C2", product_id="P2")]
    batches = list(build_records(rows, 100))
    assert len(batches) == 1
    batch = batches[0]
    assert [c.customer_id for c in batch.customers] == ["C1", "C2"]
    assert [p.product_id for p in batch.products] == ["P1", "P2"]
    assert [o.order_id for o in batch.orders] == ["O1", "O2", "O3"]


def test_orders_reference_object_ids():
    rows = [make_row("O1"), make_row("O2", customer_id="C2")]
    batch = next(build_records(rows, 10))
    by_customer = {c.customer_id: c.id for c in batch.customers}
    assert batch.orders[0].customer_id == by_customer["C1"]
    assert batch.orders[1].customer_id == by_customer["C2"]
    assert batch.orders[0].product_id == batch.orders[1].product_id == batch.products[0].id


def test_batches_split_rows_and_keep_ids_across_batches():
    rows = [make_row("O1"), make_row("O2"), make_row("O3")]
    batches = list(build_records(rows, 2))
    assert [len(b.orders) for b in batches] == [2, 1]
    assert batches[1].customers == []
    assert batches[1].orders[0].customer_id == batches[0].customers[0].id


def test_order_fields_come_from_row():
    row = make_row("O1")
    order = next(build_records([row], 5)).orders[0]
    assert order.date_of_sale == datetime(2024, 3, 15, tzinfo=timezone.utc)
    assert order.total_amount == compute_total(2, 10.0, 0.1, 5.0)
    assert order.region == "North"
    assert order.payment_method == "Card"


def test_unparsable_date_gives_zero_time():
    order = next(build_records([make_row("O1", date="2024/03/15")], 5)).orders[0]
    assert order.date_of_sale == ZERO_TIME


def test_non_positive_batch_size_rejected():
    with pytest.raises(ValueError):
        list(build_records([make_row("O1")], 0))


def test_load_sales_data_upserts_every_record(tmp_path):
    lines = [
        HEADER,
        "O1,P1,C1,Lamp,Home,North,15-03-2024,2,10.0,0.1,5.0,Card,Ann,ann@example.com,1 Example Street",
        "O2,P2,C1,Desk,Office,South,16-03-2024,1,99.5,0,0,Cash,Ann,ann@example.com,1 Example Street",
        "O3,P1,C2,Lamp,Home,East,17-03-2024,3,10.0,0,2.5,Card,Bo,bo@example.com,2 Example Road",
    ]
    path = tmp_path / "sales.csv"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    db = fake_db()

    result = load_sales_data(db, path, batch_size=2)

    assert isinstance(result, LoadResult)
    assert len(result.orders) == 3
    assert len(db.orders.writes) == 2
    order_filters = [r._filter["order_id"] for write in db.orders.writes for r in write]
    assert order_filters == ["O1", "O2", "O3"]
    customer_filters = [r._filter["customer_id"] for write in db.customers.writes for r in write]
    assert customer_filters == ["C1", "C2"]
    product_filters = [r._filter["product_id"] for write in db.products.writes for r in write]
    assert product_filters == ["P1", "P2"]


def test_load_sales_data_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_sales_data(fake_db(), tmp_path / "absent.csv")