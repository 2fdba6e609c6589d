"""
lambcrud の例外

ディスパッチの失敗は 3 種類です。

- MalformedRequestError: operation や tableName が欠けたエンベロープ (400)
- UnrecognizedOperationError: 5 つの操作以外の operation (400)
- BackendError: データアクセス層の失敗 (502)

直接呼び出しではそのまま送出され、プロキシ統合では to_dict() の JSON が
レスポンスの body になります。
"""

from typing import Dict, Any, Optional
from dataclasses import dataclass


def _details(details: Optional[Dict[str, Any]], **extra: Any) -> Dict[str, Any]:
    """details に None でない値を追加"""
    merged = dict(details or {})
    merged.update({name: value for name, value in extra.items() if value is not None})
    return merged


@dataclass
class APIError(Exception):
    """lambcrud エラーの基底クラス

    error_code を省略すると ERR_<status_code> になります。
    """

    message: str
    status_code: int = 500
    error_code: Optional[str] = None
    details: Optional[Dict[str, Any]] = None

    def __post_init__(self) -> None:
        self.error_code = self.error_code or f"ERR_{self.status_code}"
        self.details = self.details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """レスポンス body 用の辞書（details は空なら省略）"""
        body: Dict[str, Any] = {
            "error": self.error_code,
            "message": self.message,
            "status_code": self.status_code,
        }
        if self.details:
            body["details"] = self.details
        return body


class MalformedRequestError(APIError):
    """必須フィールドが欠けたリクエスト"""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            status_code=400,
            error_code="MALFORMED_REQUEST",
            details=_details(details, field=field),
        )


class UnrecognizedOperationError(APIError):
    """未知の operation"""

    def __init__(self, operation: Any, details: Optional[Dict[str, Any]] = None):
        self.operation = str(operation)

        super().__init__(
            message=f'Unrecognized operation "{self.operation}"',
            status_code=400,
            error_code="UNRECOGNIZED_OPERATION",
            details=_details(details, operation=self.operation),
        )


class BackendError(APIError):
    """データアクセス層のエラー（リトライ・復旧は行わない）"""

    def __init__(
        self,
        message: str,
        backend_code: Optional[str] = None,
        table_name: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.backend_code = backend_code
        self.table_name = table_name

        super().__init__(
            message=message,
            status_code=502,
            error_code="BACKEND_ERROR",
            details=_details(details, backend_code=backend_code, table_name=table_name),
        )


class ConfigError(APIError):
    """設定エラー"""

    def __init__(
        self,
        message: str,
        setting: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            status_code=500,
            error_code="CONFIG_ERROR",
            details=_details(details, setting=setting),
        )


def create_error_response(error: APIError, request_id: Optional[str] = None) -> Dict[str, Any]:
    """to_dict() に Lambda の request_id を付けたもの"""
    response = error.to_dict()
    if request_id:
        response["request_id"] = request_id
    return response
