"""
インメモリバックエンド

DynamoDB と同じ形のレスポンスを返すテスト・ローカル開発用のデータアクセス実装です。
"""

import copy
import re
import threading
from typing import Any, Dict, List, Optional, Tuple

from ..exceptions import BackendError
from .base import Collection, DataAccess

_CLAUSE_PATTERN = re.compile(r"\b(SET|REMOVE|ADD|DELETE)\b", re.IGNORECASE)
_NAME_PATTERN = re.compile(r"^#?[A-Za-z_][A-Za-z0-9_]*$")
_VALUE_PATTERN = re.compile(r"^:[A-Za-z0-9_]+$")

_PUT_OPTIONS = {"ReturnValues"}
_GET_OPTIONS = {"ConsistentRead"}
_UPDATE_OPTIONS = {
    "UpdateExpression",
    "ExpressionAttributeNames",
    "ExpressionAttributeValues",
    "ReturnValues",
}
_DELETE_OPTIONS = {"ReturnValues"}


def _validation_error(message: str, table_name: str) -> BackendError:
    return BackendError(message, backend_code="ValidationException", table_name=table_name)


class _Table:
    """キースキーマとアイテムを保持するテーブル"""

    def __init__(self, name: str, hash_key: str, range_key: Optional[str] = None) -> None:
        self.name = name
        self.hash_key = hash_key
        self.range_key = range_key
        self.items: Dict[Tuple[Any, ...], Dict[str, Any]] = {}

    @property
    def key_names(self) -> List[str]:
        return [self.hash_key] + ([self.range_key] if self.range_key else [])

    def key_of(self, key: Any) -> Tuple[Any, ...]:
        """キー辞書を内部キーに変換（スキーマ不一致は ValidationException）"""
        if not isinstance(key, dict) or set(key) != set(self.key_names):
            raise _validation_error(
                "The provided key element does not match the schema", self.name
            )
        return tuple(_hashable(key[name]) for name in self.key_names)

    def key_of_item(self, item: Any) -> Tuple[Any, ...]:
        if not isinstance(item, dict):
            raise _validation_error("Item must be a map", self.name)
        missing = [name for name in self.key_names if name not in item]
        if missing:
            raise _validation_error(
                f"One or more parameter values were invalid: Missing the key {missing[0]} "
                "in the item",
                self.name,
            )
        return self.key_of({name: item[name] for name in self.key_names})


def _hashable(value: Any) -> Any:
    if isinstance(value, (dict, list, set)):
        raise TypeError(f"unhashable key value: {value!r}")
    return value


class InMemoryCollection(Collection):
    """InMemoryDataAccess 上のテーブル 1 つ分の操作"""

    def __init__(self, store: "InMemoryDataAccess", table_name: str) -> None:
        super().__init__(table_name)
        self._store = store

    def insert(self, item: Dict[str, Any], /, **options: Any) -> Dict[str, Any]:
        self._store._record(self.table_name, "insert", (item, options))
        self._check_options(options, _PUT_OPTIONS)
        return_values = self._return_values(options, ("NONE", "ALL_OLD"))

        with self._store._lock:
            table = self._store._table(self.table_name)
            item_key = self._key(table.key_of_item, item)
            old = table.items.get(item_key)
            table.items[item_key] = copy.deepcopy(item)

        if return_values == "ALL_OLD" and old is not None:
            return {"Attributes": copy.deepcopy(old)}
        return {}

    def get_by_key(self, key: Dict[str, Any], /, **options: Any) -> Dict[str, Any]:
        self._store._record(self.table_name, "get_by_key", (key, options))
        self._check_options(options, _GET_OPTIONS)

        with self._store._lock:
            table = self._store._table(self.table_name)
            item = table.items.get(self._key(table.key_of, key))

        if item is None:
            return {}
        return {"Item": copy.deepcopy(item)}

    def update_by_key(self, key: Dict[str, Any], /, **changes: Any) -> Dict[str, Any]:
        self._store._record(self.table_name, "update_by_key", (key, changes))
        self._check_options(changes, _UPDATE_OPTIONS)
        return_values = self._return_values(
            changes, ("NONE", "ALL_OLD", "ALL_NEW", "UPDATED_OLD", "UPDATED_NEW")
        )

        with self._store._lock:
            table = self._store._table(self.table_name)
            item_key = self._key(table.key_of, key)
            assignments, removals = _parse_update_expression(
                changes.get("UpdateExpression"),
                changes.get("ExpressionAttributeNames") or {},
                changes.get("ExpressionAttributeValues") or {},
                self.table_name,
            )

            touched = set(assignments) | set(removals)
            if touched & set(table.key_names):
                raise _validation_error(
                    "Cannot update attribute that is part of the key", self.table_name
                )

            old = table.items.get(item_key)
            new = copy.deepcopy(old) if old is not None else copy.deepcopy(key)
            new.update(copy.deepcopy(assignments))
            for name in removals:
                new.pop(name, None)
            table.items[item_key] = new

        if return_values == "ALL_OLD":
            return {"Attributes": copy.deepcopy(old)} if old is not None else {}
        if return_values == "ALL_NEW":
            return {"Attributes": copy.deepcopy(new)}
        if return_values == "UPDATED_OLD":
            updated = {k: v for k, v in (old or {}).items() if k in touched}
            return {"Attributes": copy.deepcopy(updated)} if updated else {}
        if return_values == "UPDATED_NEW":
            updated = {k: v for k, v in new.items() if k in assignments}
            return {"Attributes": copy.deepcopy(updated)} if updated else {}
        return {}

    def delete_by_key(self, key: Dict[str, Any], /, **options: Any) -> Dict[str, Any]:
        self._store._record(self.table_name, "delete_by_key", (key, options))
        self._check_options(options, _DELETE_OPTIONS)
        return_values = self._return_values(options, ("NONE", "ALL_OLD"))

        with self._store._lock:
            table = self._store._table(self.table_name)
            # 存在しないアイテムの削除は成功扱い
            old = table.items.pop(self._key(table.key_of, key), None)

        if return_values == "ALL_OLD" and old is not None:
            return {"Attributes": old}
        return {}

    def _key(self, resolver: Any, value: Any) -> Tuple[Any, ...]:
        try:
            return resolver(value)
        except TypeError as e:
            raise _validation_error(str(e), self.table_name) from e

    def _check_options(self, options: Dict[str, Any], allowed: set) -> None:
        unsupported = sorted(set(options) - allowed)
        if unsupported:
            raise _validation_error(
                f"Unsupported parameters: {', '.join(unsupported)}", self.table_name
            )

    def _return_values(self, options: Dict[str, Any], allowed: Tuple[str, ...]) -> str:
        value = options.get("ReturnValues", "NONE")
        if value not in allowed:
            raise _validation_error(f"Unsupported ReturnValues: {value}", self.table_name)
        return str(value)


class InMemoryDataAccess(DataAccess):
    """スレッドセーフなインメモリ DataAccess

    テーブルは create_table で作成します。存在しないテーブルへの操作は
    ResourceNotFoundException の BackendError になります。
    """

    def __init__(self) -> None:
        self._tables: Dict[str, _Table] = {}
        self._lock = threading.RLock()
        self.calls: List[Tuple[str, str, Any]] = []

    def create_table(self, name: str, hash_key: str, range_key: Optional[str] = None) -> None:
        """テーブルを作成"""
        with self._lock:
            if name in self._tables:
                raise BackendError(
                    f"Table already exists: {name}",
                    backend_code="ResourceInUseException",
                    table_name=name,
                )
            self._tables[name] = _Table(name, hash_key, range_key)

    def delete_table(self, name: str) -> None:
        """テーブルを削除"""
        with self._lock:
            self._table(name)
            del self._tables[name]

    def table_names(self) -> List[str]:
        with self._lock:
            return sorted(self._tables)

    def items(self, name: str) -> List[Dict[str, Any]]:
        """テーブル内の全アイテム（テスト用）"""
        with self._lock:
            return [copy.deepcopy(item) for item in self._table(name).items.values()]

    def collection(self, table_name: str) -> InMemoryCollection:
        return InMemoryCollection(self, table_name)

    def _table(self, name: str) -> _Table:
        table = self._tables.get(name)
        if table is None:
            raise BackendError(
                "Requested resource not found",
                backend_code="ResourceNotFoundException",
                table_name=name,
            )
        return table

    def _record(self, table_name: str, action: str, args: Any) -> None:
        with self._lock:
            self.calls.append((table_name, action, copy.deepcopy(args)))


def _parse_update_expression(
    expression: Optional[str],
    names: Dict[str, str],
    values: Dict[str, Any],
    table_name: str,
) -> Tuple[Dict[str, Any], List[str]]:
    """SET / REMOVE 句だけをサポートする UpdateExpression パーサー"""
    if not expression or not expression.strip():
        raise _validation_error("UpdateExpression is required", table_name)

    parts = _CLAUSE_PATTERN.split(expression)
    if parts[0].strip():
        raise _validation_error(f"Invalid UpdateExpression: {expression}", table_name)

    assignments: Dict[str, Any] = {}
    removals: List[str] = []

    for keyword, body in zip(parts[1::2], parts[2::2]):
        keyword = keyword.upper()
        if keyword not in ("SET", "REMOVE"):
            raise _validation_error(f"Unsupported update clause: {keyword}", table_name)
        if "(" in body:
            raise _validation_error("Update functions are not supported", table_name)

        for action in body.split(","):
            action = action.strip()
            if not action:
                raise _validation_error(f"Invalid UpdateExpression: {expression}", table_name)

            if keyword == "SET":
                path, sep, operand = action.partition("=")
                operand = operand.strip()
                if not sep or not _VALUE_PATTERN.match(operand):
                    raise _validation_error(
                        f"Only 'path = :value' assignments are supported: {action}", table_name
                    )
                if operand not in values:
                    raise _validation_error(
                        f"An expression attribute value used in expression is not defined: "
                        f"{operand}",
                        table_name,
                    )
                assignments[_resolve_name(path.strip(), names, table_name)] = values[operand]
            else:
                removals.append(_resolve_name(action, names, table_name))

    return assignments, removals


def _resolve_name(path: str, names: Dict[str, str], table_name: str) -> str:
    if not _NAME_PATTERN.match(path):
        raise _validation_error(f"Unsupported attribute path: {path}", table_name)
    if path.startswith("#"):
        if path not in names:
            raise _validation_error(
                f"An expression attribute name used in expression is not defined: {path}",
                table_name,
            )
        return names[path]
    return path
