"""
データアクセス層のインターフェース

テーブルごとの insert / get / update / delete を提供するコレクションと、
テーブル名からコレクションを解決する DataAccess を定義します。
"""

from abc import ABC, abstractmethod
from typing import Any, Dict


class Collection(ABC):
    """1 テーブル分のデータアクセス操作"""

    def __init__(self, table_name: str) -> None:
        self.table_name = table_name

    @abstractmethod
    def insert(self, item: Dict[str, Any], /, **options: Any) -> Any:
        """アイテムを保存"""

    @abstractmethod
    def get_by_key(self, key: Dict[str, Any], /, **options: Any) -> Any:
        """キーでアイテムを取得"""

    @abstractmethod
    def update_by_key(self, key: Dict[str, Any], /, **changes: Any) -> Any:
        """キーでアイテムを更新"""

    @abstractmethod
    def delete_by_key(self, key: Dict[str, Any], /, **options: Any) -> Any:
        """キーでアイテムを削除"""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.table_name!r})"


class DataAccess(ABC):
    """テーブル名からコレクションを解決する"""

    @abstractmethod
    def collection(self, table_name: str) -> Collection:
        """コレクションのハンドルを取得（バックエンドへの呼び出しは行わない）"""
