"""
JSON 処理統一ハンドラー

Lambda 環境での JSON 処理を提供します。
DynamoDB が返す Decimal / set / bytes も JSON に変換できるようにします。
"""

import base64
import decimal
import json
from typing import Any, Optional, Union

from boto3.dynamodb.types import Binary


def _default(value: Any) -> Any:
    """標準 json で扱えない DynamoDB の型を変換"""
    if isinstance(value, decimal.Decimal):
        return int(value) if value % 1 == 0 else float(value)
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("utf-8")
    if isinstance(value, Binary):
        return base64.b64encode(value.value).decode("utf-8")
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class JSONHandler:
    """JSON 処理の統一インターフェース"""

    @staticmethod
    def loads(data: Union[str, bytes, None]) -> Any:
        """
        JSON パース

        Args:
            data: JSON 文字列またはバイト列

        Returns:
            Any: パースされたオブジェクト（空データの場合は None）

        Raises:
            ValueError: 無効な JSON の場合
        """
        if not data:
            return None

        if isinstance(data, bytes):
            data = data.decode("utf-8")
        return json.loads(data)

    @staticmethod
    def dumps(data: Any, ensure_ascii: bool = False, indent: Optional[int] = None) -> str:
        """
        JSON シリアライズ

        Args:
            data: シリアライズするオブジェクト
            ensure_ascii: ASCII エンコーディングを強制するか
            indent: インデントレベル（None で最小化）

        Returns:
            str: JSON 文字列

        Note:
            Lambda 環境での転送効率化のため、デフォルトで最小化されます
        """
        separators = (",", ":") if indent is None else (",", ": ")
        return json.dumps(
            data,
            ensure_ascii=ensure_ascii,
            separators=separators,
            indent=indent,
            default=_default,
        )
