"""
DynamoDB バックエンド

boto3 の Table リソースを使ったデータアクセス実装です。
"""

import logging
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..exceptions import BackendError
from .base import Collection, DataAccess

logger = logging.getLogger(__name__)


class DynamoDBCollection(Collection):
    """DynamoDB テーブル 1 つ分の操作"""

    def __init__(self, table: Any, table_name: str) -> None:
        super().__init__(table_name)
        self._table = table

    def insert(self, item: Dict[str, Any], /, **options: Any) -> Any:
        return self._call("put_item", Item=item, **options)

    def get_by_key(self, key: Dict[str, Any], /, **options: Any) -> Any:
        return self._call("get_item", Key=key, **options)

    def update_by_key(self, key: Dict[str, Any], /, **changes: Any) -> Any:
        return self._call("update_item", Key=key, **changes)

    def delete_by_key(self, key: Dict[str, Any], /, **options: Any) -> Any:
        return self._call("delete_item", Key=key, **options)

    def _call(self, action: str, /, **kwargs: Any) -> Any:
        """Table のメソッドを呼び出し、失敗は BackendError に変換"""
        # DynamoDB のパラメータ名は大文字始まり。self などは boto3 の引数と衝突する
        unknown = sorted(name for name in kwargs if not name[:1].isupper())
        if unknown:
            raise BackendError(
                f'Unknown parameter in input: "{unknown[0]}"',
                backend_code="ParamValidationError",
                table_name=self.table_name,
            )

        try:
            return getattr(self._table, action)(**kwargs)
        except ClientError as e:
            error = e.response.get("Error", {})
            code = error.get("Code")
            message = error.get("Message") or str(e)
            logger.error(f"DynamoDB {action} 失敗 ({self.table_name}): {code} {message}")
            raise BackendError(message, backend_code=code, table_name=self.table_name) from e
        except BotoCoreError as e:
            logger.error(f"DynamoDB {action} 失敗 ({self.table_name}): {e}")
            raise BackendError(
                str(e), backend_code=type(e).__name__, table_name=self.table_name
            ) from e


class DynamoDBDataAccess(DataAccess):
    """boto3 の DynamoDB リソースを使う DataAccess"""

    def __init__(
        self,
        region_name: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        resource: Any = None,
    ) -> None:
        """
        Args:
            region_name: AWS リージョン（None の場合は boto3 の既定）
            endpoint_url: DynamoDB Local などのエンドポイント
            resource: 既存の boto3 DynamoDB リソース（指定時は他の引数を無視）
        """
        if resource is None:
            resource = boto3.resource(
                "dynamodb", region_name=region_name, endpoint_url=endpoint_url
            )
        self._resource = resource

    def collection(self, table_name: str) -> DynamoDBCollection:
        # Table() はリソースを生成するだけで API は呼ばない
        return DynamoDBCollection(self._resource.Table(table_name), table_name)
