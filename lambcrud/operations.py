"""
Operation 定義

ディスパッチャーが受け付ける固定の操作名を列挙します。
"""

from enum import Enum
from typing import Any

from .exceptions import UnrecognizedOperationError


class Operation(str, Enum):
    """受け付ける操作の種類"""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    ECHO = "echo"

    @property
    def requires_table(self) -> bool:
        """tableName が必須かどうか"""
        return self is not Operation.ECHO

    @classmethod
    def parse(cls, name: Any) -> "Operation":
        """操作名から Operation を取得

        Raises:
            UnrecognizedOperationError: 未知の操作名の場合
        """
        for member in cls:
            if member.value == name:
                return member
        raise UnrecognizedOperationError(name)

    @classmethod
    def names(cls) -> list:
        """操作名の一覧"""
        return [member.value for member in cls]
