"""MongoDB connection and the collections the service works with."""

from __future__ import annotations

import pymongo
from pymongo.errors import PyMongoError

from .models import Customer, Order, Product

CONNECT_TIMEOUT_MS = 10_000


class MongoClient:
    """A MongoDB client bound to one database and its sales collections."""

    def __init__(self, uri, db_name, client=None):
        if client is None:
            try:
                client = pymongo.MongoClient(
                    uri,
                    connectTimeoutMS=CONNECT_TIMEOUT_MS,
                    serverSelectionTimeoutMS=CONNECT_TIMEOUT_MS,
                )
            except (PyMongoError, ValueError, TypeError) as exc:
                raise ConnectionError(f"failed to connect to MongoDB: {exc}") from exc
        self.client = client
        self.database = client[db_name]
        self.customers = self.database[Customer.collection_name]
        self.products = self.database[Product.collection_name]
        self.orders = self.database[Order.collection_name]

    def close(self):
        """Close the underlying connection."""
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
        return False


def connect(config):
    """Open a client for the URI and database name in the configuration."""
    return MongoClient(config.db_uri, config.db_name)