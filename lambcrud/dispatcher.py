"""
Operation ディスパッチャー

リクエストエンベロープの operation に応じて、payload をそのまま
データアクセス層の 1 回の呼び出しに転送します。
"""

import logging
from typing import Any, Dict, Mapping, Tuple, Union

from .backend.base import Collection, DataAccess
from .envelope import Envelope
from .exceptions import BackendError, MalformedRequestError
from .operations import Operation

logger = logging.getLogger(__name__)


class Dispatcher:
    """状態を持たないリクエストルーター"""

    def __init__(self, data_access: DataAccess) -> None:
        self.data_access = data_access

    def dispatch(self, envelope: Union[Envelope, Mapping[str, Any]]) -> Any:
        """エンベロープを 1 回のバックエンド呼び出しに変換して結果を返す

        Raises:
            MalformedRequestError: operation または必須の tableName がない場合
            UnrecognizedOperationError: 未知の operation の場合
            BackendError: データアクセス層が失敗した場合
        """
        if not isinstance(envelope, Envelope):
            envelope = Envelope.from_dict(envelope)
        elif envelope.operation is None:
            raise MalformedRequestError("operation is required", field="operation")

        operation = Operation.parse(envelope.operation)
        table_name = envelope.table_name

        if operation.requires_table and not (isinstance(table_name, str) and table_name):
            raise MalformedRequestError(
                f"tableName is required for operation '{operation.value}'", field="tableName"
            )

        logger.info(f"dispatch: operation={operation.value} table={table_name}")

        payload = envelope.payload
        if operation is Operation.ECHO:
            return payload

        collection = self.data_access.collection(table_name)  # type: ignore[arg-type]
        try:
            return self._forward(operation, collection, payload)
        except BackendError as e:
            logger.error(
                f"バックエンドエラー: operation={operation.value} table={table_name} "
                f"code={e.backend_code} message={e.message}"
            )
            raise

    def _forward(self, operation: Operation, collection: Collection, payload: Any) -> Any:
        """operation に対応するコレクションの操作を 1 回だけ呼び出す"""
        if operation is Operation.CREATE:
            item, options = _split_payload(payload, "Item", operation, collection.table_name)
            return collection.insert(item, **options)
        elif operation is Operation.READ:
            key, options = _split_payload(payload, "Key", operation, collection.table_name)
            return collection.get_by_key(key, **options)
        elif operation is Operation.UPDATE:
            key, changes = _split_payload(payload, "Key", operation, collection.table_name)
            return collection.update_by_key(key, **changes)
        elif operation is Operation.DELETE:
            key, options = _split_payload(payload, "Key", operation, collection.table_name)
            return collection.delete_by_key(key, **options)

        raise AssertionError(f"unhandled operation: {operation}")


def _split_payload(
    payload: Any, field: str, operation: Operation, table_name: str
) -> Tuple[Any, Dict[str, Any]]:
    """payload から Item / Key を取り出し、残りをオプションとして返す"""
    if not isinstance(payload, Mapping):
        raise BackendError(
            f"payload for '{operation.value}' must be an object",
            backend_code="ValidationException",
            table_name=table_name,
        )
    if field not in payload:
        raise BackendError(
            f"payload for '{operation.value}' requires '{field}'",
            backend_code="ValidationException",
            table_name=table_name,
        )

    rest = {name: value for name, value in payload.items() if name != field}
    return payload[field], rest
