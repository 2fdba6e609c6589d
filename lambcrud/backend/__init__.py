"""
データアクセス層

DynamoDB 実装とインメモリ実装を提供します。
"""

from .base import Collection, DataAccess
from .dynamodb import DynamoDBCollection, DynamoDBDataAccess
from .memory import InMemoryCollection, InMemoryDataAccess

__all__ = [
    "Collection",
    "DataAccess",
    "DynamoDBCollection",
    "DynamoDBDataAccess",
    "InMemoryCollection",
    "InMemoryDataAccess",
]
