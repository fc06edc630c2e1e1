"""Revenue aggregations and bulk upserts against the sales collections."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from pymongo import UpdateOne
from pymongo.errors import BulkWriteError

from .logger import LOGGER_NAME

_log = logging.getLogger(LOGGER_NAME)

_TOTAL_EXPRESSION = {
    "$add": [
        {
            "$multiply": [
                "$quantity_sold",
                "$unit_price",
                {"$subtract": [1, "$discount"]},
            ]
        },
        "$shipping_cost",
    ]
}


@dataclass
class BulkSummary:
    """Counts reported by a bulk write."""

    inserted_count: int = 0
    matched_count: int = 0
    modified_count: int = 0
    deleted_count: int = 0
    upserted_count: int = 0
    upserted_ids: dict[int, Any] = field(default_factory=dict)

    @classmethod
    def _from_result(cls, result) -> "BulkSummary":
        return cls(
            inserted_count=result.inserted_count,
            matched_count=result.matched_count,
            modified_count=result.modified_count,
            deleted_count=result.deleted_count,
            upserted_count=result.upserted_count,
            upserted_ids=dict(result.upserted_ids or {}),
        )

    @classmethod
    def _from_details(cls, details) -> "BulkSummary":
        return cls(
            inserted_count=details.get("nInserted", 0),
            matched_count=details.get("nMatched", 0),
            modified_count=details.get("nModified", 0),
            deleted_count=details.get("nRemoved", 0),
            upserted_count=details.get("nUpserted", 0),
            upserted_ids={item["index"]: item["_id"] for item in details.get("upserted", [])},
        )


def revenue_pipeline(start, end, group_field=None):
    """Aggregation pipeline summing order totals in a date range, optionally per field."""
    match = {"date_of_sale": {"$gte": start, "$lte": end}}
    project: dict[str, Any] = {}
    if group_field is not None:
        project[group_field] = f"${group_field}"
    project["total"] = _TOTAL_EXPRESSION
    group_id = None if group_field is None else f"${group_field}"
    group = {"_id": group_id, "totalRevenue": {"$sum": "$total"}}
    return [{"$match": match}, {"$project": project}, {"$group": group}]


def get_total_revenue(collection, start, end):
    """Total revenue of orders sold between start and end inclusive."""
    results = list(collection.aggregate(revenue_pipeline(start, end)))
    if not results:
        return 0.0
    return float(results[0]["totalRevenue"])


def grouped_revenue(collection, start, end, group_field):
    """Revenue per distinct value of group_field for orders between start and end."""
    return list(collection.aggregate(revenue_pipeline(start, end, group_field)))


def bulk_upsert(collection, documents, key, label):
    """Upsert documents matched on key in one unordered bulk write."""
    documents = list(documents)
    if not documents:
        return None

    operations = [
        UpdateOne({key: document[key]}, {"$set": document}, upsert=True)
        for document in documents
    ]
    try:
        summary = BulkSummary._from_result(collection.bulk_write(operations, ordered=False))
    except BulkWriteError as exc:
        _log.info(f"Error in insert {label}", extra={"fields": {"error": str(exc)}})
        summary = BulkSummary._from_details(exc.details or {})

    _log.info(
        f"insert {label} summary",
        extra={
            "fields": {
                "InsertedCount": summary.inserted_count,
                "MatchedCount": summary.matched_count,
                "ModifiedCount": summary.modified_count,
                "DeletedCount": summary.deleted_count,
                "UpsertedCount": summary.upserted_count,
                "UpsertedIDs": {str(index): str(oid) for index, oid in summary.upserted_ids.items()},
            }
        },
    )
    return summary


def bulk_insert_customers(collection, customers):
    """Upsert customers keyed on their customer id."""
    return bulk_upsert(collection, (c.to_document() for c in customers), "customer_id", "customer")


def bulk_insert_products(collection, products):
    """Upsert products keyed on their product id."""
    return bulk_upsert(collection, (p.to_document() for p in products), "product_id", "product")


def bulk_insert_orders(collection, orders):
    """Upsert orders keyed on their order id."""
    return bulk_upsert(collection, (o.to_document() for o in orders), "order_id", "order")