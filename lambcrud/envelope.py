"""
Envelope クラス

Lambda イベントからディスパッチ用のリクエストエンベロープを取り出します。
"""

import base64
import binascii
from typing import Dict, Any, Optional, Mapping

from .exceptions import MalformedRequestError
from .json_handler import JSONHandler


def is_proxy_event(event: Any) -> bool:
    """API Gateway プロキシ統合のイベントかどうかを判定

    オブジェクトでないイベント（配列、文字列、null など）は直接呼び出しとして扱います。
    """
    if not isinstance(event, Mapping):
        return False
    if "httpMethod" in event or "routeKey" in event:
        return True
    request_context = event.get("requestContext")
    return isinstance(request_context, dict) and "http" in request_context


class Envelope:
    """operation / tableName / payload を保持するリクエストエンベロープ"""

    def __init__(
        self, operation: Any, table_name: Optional[str] = None, payload: Any = None
    ) -> None:
        self.operation = operation
        self.table_name = table_name
        self.payload = payload

    def __repr__(self) -> str:
        return (
            f"Envelope(operation={self.operation!r}, table_name={self.table_name!r}, "
            f"payload={self.payload!r})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Envelope):
            return NotImplemented
        return (self.operation, self.table_name, self.payload) == (
            other.operation,
            other.table_name,
            other.payload,
        )

    @classmethod
    def from_dict(cls, data: Any) -> "Envelope":
        """辞書からエンベロープを作成

        Raises:
            MalformedRequestError: オブジェクトでない場合、operation がない場合
        """
        if not isinstance(data, Mapping):
            raise MalformedRequestError("Request envelope must be a JSON object")

        if data.get("operation") is None:
            raise MalformedRequestError("operation is required", field="operation")

        return cls(
            operation=data["operation"],
            table_name=data.get("tableName"),
            payload=data.get("payload"),
        )

    @classmethod
    def from_event(cls, event: Any) -> "Envelope":
        """Lambda イベントからエンベロープを作成

        直接呼び出し（非プロキシ統合）ではイベント自体がエンベロープ、
        プロキシ統合では body の JSON がエンベロープになります。
        """
        if is_proxy_event(event):
            return cls.from_dict(_decode_proxy_body(event))
        return cls.from_dict(event)

    def to_dict(self) -> Dict[str, Any]:
        """辞書形式に変換"""
        result: Dict[str, Any] = {"operation": self.operation}
        if self.table_name is not None:
            result["tableName"] = self.table_name
        if self.payload is not None:
            result["payload"] = self.payload
        return result


def _decode_proxy_body(event: Mapping[str, Any]) -> Any:
    """プロキシイベントの body をパース"""
    body = event.get("body")
    if not body:
        raise MalformedRequestError("Request body is required", field="body")

    # テストツールなどはパース済みの body を渡すことがある
    if isinstance(body, Mapping):
        return body

    if event.get("isBase64Encoded"):
        try:
            body = base64.b64decode(body)
        except (binascii.Error, TypeError) as e:
            raise MalformedRequestError("Request body is not valid base64", field="body") from e

    try:
        return JSONHandler.loads(body)
    except (ValueError, UnicodeDecodeError) as e:
        raise MalformedRequestError("Request body is not valid JSON", field="body") from e
