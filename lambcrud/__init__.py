"""
lambcrud

API Gateway + Lambda + DynamoDB 用の CRUD ディスパッチャー

使用例:
    from lambcrud import create_lambda_handler, InMemoryDataAccess

    store = InMemoryDataAccess()
    store.create_table("lambda-apigateway", hash_key="id")

    lambda_handler = create_lambda_handler(store)

    lambda_handler(
        {
            "operation": "create",
            "tableName": "lambda-apigateway",
            "payload": {"Item": {"id": "1", "name": "Sam"}},
        },
        None,
    )
"""

from .core import App
from .dispatcher import Dispatcher
from .envelope import Envelope, is_proxy_event
from .operations import Operation
from .response import Response
from .utils import create_lambda_handler
from .config import Settings, build_data_access, configure_logging
from .backend import (
    Collection,
    DataAccess,
    DynamoDBDataAccess,
    InMemoryDataAccess,
)
from .exceptions import (
    APIError,
    MalformedRequestError,
    UnrecognizedOperationError,
    BackendError,
    ConfigError,
)
from .error_handlers import ErrorHandler

__version__ = "0.1.0"

__all__ = [
    "App",
    "Dispatcher",
    "Envelope",
    "is_proxy_event",
    "Operation",
    "Response",
    "create_lambda_handler",
    "Settings",
    "build_data_access",
    "configure_logging",
    "Collection",
    "DataAccess",
    "DynamoDBDataAccess",
    "InMemoryDataAccess",
    "APIError",
    "MalformedRequestError",
    "UnrecognizedOperationError",
    "BackendError",
    "ConfigError",
    "ErrorHandler",
]
