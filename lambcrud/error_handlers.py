"""
エラーハンドラーシステム

プロキシ統合でディスパッチが失敗したときに、例外を API Gateway に返す
Response に変換します。直接呼び出しでは使われず、例外はそのまま伝播します。
"""

import logging
from typing import Dict, Type, Callable, Any, Optional

from .exceptions import APIError, create_error_response
from .response import Response

logger = logging.getLogger(__name__)

# (error, event, context) -> Response
ErrorHandlerFunc = Callable[[Exception, Dict[str, Any], Any], Response]

_JSON_HEADERS = {"Content-Type": "application/json"}


def _request_id(context: Any) -> Optional[str]:
    return getattr(context, "aws_request_id", None) if context else None


class ErrorHandlerRegistry:
    """例外の型ごとのハンドラー

    解決順は、登録済みハンドラー（例外クラスの MRO で最も近い型）、
    lambcrud のエラー（MalformedRequestError など）の標準レスポンス、
    デフォルトハンドラー、最後に 500 INTERNAL_ERROR です。
    """

    def __init__(self) -> None:
        self._handlers: Dict[Type[Exception], ErrorHandlerFunc] = {}
        self._default_handler: Optional[ErrorHandlerFunc] = None

    def register(self, exception_type: Type[Exception], handler: ErrorHandlerFunc) -> None:
        self._handlers[exception_type] = handler

    def set_default_handler(self, handler: ErrorHandlerFunc) -> None:
        self._default_handler = handler

    def merge(self, other: "ErrorHandlerRegistry") -> None:
        """別のレジストリのハンドラーを取り込む（同じ型は上書き）"""
        self._handlers.update(other._handlers)
        if other._default_handler:
            self._default_handler = other._default_handler

    def find_handler(self, error: Exception) -> Optional[ErrorHandlerFunc]:
        """error に最も近い型のハンドラー"""
        for exception_type in type(error).__mro__:
            handler = self._handlers.get(exception_type)
            if handler is not None:
                return handler
        return None

    def handle_error(self, error: Exception, event: Dict[str, Any], context: Any) -> Response:
        handler = self.find_handler(error)
        if handler is not None:
            return handler(error, event, context)

        if isinstance(error, APIError):
            return Response(
                create_error_response(error, _request_id(context)),
                status_code=error.status_code,
                headers=dict(_JSON_HEADERS),
            )

        if self._default_handler:
            return self._default_handler(error, event, context)

        return self._internal_error(error, context)

    def _internal_error(self, error: Exception, context: Any) -> Response:
        """ディスパッチ中の想定外の例外。内容はログにだけ残す"""
        logger.error(f"予期しないエラー: {type(error).__name__}: {error}", exc_info=error)

        body = APIError("An unexpected error occurred", error_code="INTERNAL_ERROR")
        return Response(
            create_error_response(body, _request_id(context)),
            status_code=500,
            headers=dict(_JSON_HEADERS),
        )


class ErrorHandler:
    """App.add_error_handler に渡すデコレータ集"""

    def __init__(self) -> None:
        self._registry = ErrorHandlerRegistry()

    def catch(self, exception_type: Type[Exception]) -> Callable:
        """exception_type（とそのサブクラス）のハンドラーを登録"""

        def decorator(handler_func: Callable) -> Callable:
            self._registry.register(exception_type, handler_func)
            return handler_func

        return decorator

    def default(self, handler_func: Callable) -> Callable:
        """lambcrud のエラー以外の例外のハンドラーを登録"""
        self._registry.set_default_handler(handler_func)
        return handler_func

    def handle_error(self, error: Exception, event: Dict[str, Any], context: Any) -> Response:
        return self._registry.handle_error(error, event, context)
