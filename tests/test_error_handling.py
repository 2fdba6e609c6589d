"""
エラーハンドリング機能のテスト
"""

import json
from unittest.mock import Mock

from lambcrud import App, ErrorHandler, Response
from lambcrud.backend.base import DataAccess
from lambcrud.error_handlers import ErrorHandlerRegistry
from lambcrud.exceptions import (
    APIError,
    BackendError,
    ConfigError,
    MalformedRequestError,
    UnrecognizedOperationError,
    create_error_response,
)


class MockContext:
    aws_request_id = "test-request-123"


class TestExceptions:
    """例外クラスのテスト"""

    def test_api_error_defaults(self):
        """APIError の既定値"""
        error = APIError("boom")

        assert error.status_code == 500
        assert error.error_code == "ERR_500"
        assert error.details == {}
        assert str(error) == "boom"

    def test_malformed_request(self):
        """MalformedRequestError"""
        error = MalformedRequestError("operation is required", field="operation")

        assert error.to_dict() == {
            "error": "MALFORMED_REQUEST",
            "message": "operation is required",
            "status_code": 400,
            "details": {"field": "operation"},
        }

    def test_unrecognized_operation(self):
        """UnrecognizedOperationError は操作名を保持する"""
        error = UnrecognizedOperationError("list")

        assert error.operation == "list"
        assert error.status_code == 400
        assert error.error_code == "UNRECOGNIZED_OPERATION"
        assert str(error) == 'Unrecognized operation "list"'

    def test_backend_error(self):
        """BackendError"""
        error = BackendError("not found", backend_code="ResourceNotFoundException", table_name="T")

        assert error.status_code == 502
        assert error.backend_code == "ResourceNotFoundException"
        assert error.details == {"backend_code": "ResourceNotFoundException", "table_name": "T"}

    def test_config_error(self):
        """ConfigError"""
        error = ConfigError("bad", setting="backend")

        assert error.status_code == 500
        assert error.details == {"setting": "backend"}

    def test_create_error_response(self):
        """request_id 付きのエラーレスポンス"""
        response = create_error_response(MalformedRequestError("x"), "req-1")

        assert response["request_id"] == "req-1"
        assert "details" not in response


class TestErrorHandlerRegistry:
    """ErrorHandlerRegistry のテスト"""

    def test_api_error_is_rendered(self):
        """APIError は自動でレスポンスに変換"""
        registry = ErrorHandlerRegistry()

        response = registry.handle_error(UnrecognizedOperationError("x"), {}, MockContext())

        assert response.status_code == 400
        assert response.content["request_id"] == "test-request-123"

    def test_unknown_error_hides_details(self):
        """未知のエラーは 500 で内部情報を出さない"""
        registry = ErrorHandlerRegistry()

        response = registry.handle_error(RuntimeError("secret detail"), {}, None)

        assert response.status_code == 500
        assert response.content["error"] == "INTERNAL_ERROR"
        assert "secret detail" not in json.dumps(response.content)

    def test_default_handler(self):
        """デフォルトハンドラーは APIError 以外に使われる"""
        registry = ErrorHandlerRegistry()
        registry.set_default_handler(lambda e, event, ctx: Response({"custom": True}, 503))

        assert registry.handle_error(RuntimeError(), {}, None).status_code == 503
        assert registry.handle_error(MalformedRequestError("x"), {}, None).status_code == 400

    def test_closest_handler_wins(self):
        """登録順に関係なく、例外の型に最も近いハンドラーを使う"""
        registry = ErrorHandlerRegistry()
        registry.register(APIError, lambda e, event, ctx: Response("api", 500))
        registry.register(BackendError, lambda e, event, ctx: Response("backend", 503))

        assert registry.handle_error(BackendError("x"), {}, None).content == "backend"
        assert registry.handle_error(MalformedRequestError("x"), {}, None).content == "api"


class TestCustomErrorHandler:
    """App へのカスタムエラーハンドラーの登録"""

    def create_event(self, envelope):
        return {"httpMethod": "POST", "path": "/", "body": json.dumps(envelope)}

    def test_catch_backend_error(self):
        """BackendError を独自のレスポンスに変換"""
        handler = ErrorHandler()

        @handler.catch(BackendError)
        def handle_backend(error, event, context):
            return Response({"retry": False, "code": error.backend_code}, status_code=503)

        data_access = Mock(spec=DataAccess)
        data_access.collection.return_value.table_name = "T"
        data_access.collection.return_value.get_by_key.side_effect = BackendError(
            "throttled", backend_code="ProvisionedThroughputExceededException"
        )

        app = App(
            self.create_event({"operation": "read", "tableName": "T", "payload": {"Key": {}}}),
            MockContext(),
            data_access,
        )
        app.add_error_handler(handler)
        result = app.handle_request()

        assert result["statusCode"] == 503
        assert json.loads(result["body"]) == {
            "retry": False,
            "code": "ProvisionedThroughputExceededException",
        }

    def test_default_handler(self):
        """予期しない例外のデフォルトハンドラー"""
        handler = ErrorHandler()

        @handler.default
        def handle_unknown(error, event, context):
            return Response({"error": type(error).__name__}, status_code=500)

        data_access = Mock(spec=DataAccess)
        data_access.collection.side_effect = RuntimeError("boom")

        app = App(
            self.create_event({"operation": "read", "tableName": "T", "payload": {"Key": {}}}),
            None,
            data_access,
        )
        app.add_error_handler(handler)
        result = app.handle_request()

        assert json.loads(result["body"]) == {"error": "RuntimeError"}
