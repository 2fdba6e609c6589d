"""
設定

環境変数から lambcrud の設定を読み込み、データアクセス層とログを構成します。
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple

from .backend.base import DataAccess
from .exceptions import ConfigError

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
BACKENDS = ("dynamodb", "memory")

# (テーブル名, ハッシュキー, レンジキー)
TableSpec = Tuple[str, str, Optional[str]]


@dataclass
class Settings:
    """lambcrud の設定"""

    backend: str = "dynamodb"
    region_name: Optional[str] = None
    endpoint_url: Optional[str] = None
    log_level: str = "INFO"
    memory_tables: List[TableSpec] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.backend = self.backend.lower()
        if self.backend not in BACKENDS:
            raise ConfigError(
                f"Unknown backend '{self.backend}' (choose from: {', '.join(BACKENDS)})",
                setting="backend",
            )

        self.log_level = self.log_level.upper()
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ConfigError(f"Unknown log level '{self.log_level}'", setting="log_level")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """環境変数から設定を作成"""
        env = os.environ if environ is None else environ

        return cls(
            backend=env.get("LAMBCRUD_BACKEND", "dynamodb"),
            region_name=env.get("AWS_REGION") or env.get("AWS_DEFAULT_REGION") or None,
            endpoint_url=env.get("LAMBCRUD_DYNAMODB_ENDPOINT") or None,
            log_level=env.get("LAMBCRUD_LOG_LEVEL", "INFO"),
            memory_tables=parse_table_specs(env.get("LAMBCRUD_MEMORY_TABLES", "")),
        )


def parse_table_spec(spec: str) -> TableSpec:
    """'name:hash[:range]' 形式のテーブル定義をパース"""
    parts = [part.strip() for part in spec.split(":")]
    if len(parts) not in (2, 3) or not all(parts):
        raise ConfigError(
            f"Invalid table spec '{spec}' (expected NAME:HASH_KEY[:RANGE_KEY])",
            setting="memory_tables",
        )
    return parts[0], parts[1], parts[2] if len(parts) == 3 else None


def parse_table_specs(value: str) -> List[TableSpec]:
    """カンマ区切りのテーブル定義をパース"""
    return [parse_table_spec(spec) for spec in value.split(",") if spec.strip()]


def build_data_access(settings: Settings) -> DataAccess:
    """設定からデータアクセス層を構築"""
    if settings.backend == "memory":
        from .backend.memory import InMemoryDataAccess

        store = InMemoryDataAccess()
        for name, hash_key, range_key in settings.memory_tables:
            store.create_table(name, hash_key, range_key)
        return store

    from .backend.dynamodb import DynamoDBDataAccess

    return DynamoDBDataAccess(region_name=settings.region_name, endpoint_url=settings.endpoint_url)


def configure_logging(level: str = "INFO") -> None:
    """ログ設定

    Lambda ランタイムではルートロガーにハンドラーが既に設定されているため、
    basicConfig は何もしません。その場合も lambcrud ロガーのレベルは反映します。
    """
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("lambcrud").setLevel(level)


def describe(settings: Settings) -> Dict[str, object]:
    """ログ出力用の設定サマリー"""
    return {
        "backend": settings.backend,
        "region_name": settings.region_name,
        "endpoint_url": settings.endpoint_url,
        "memory_tables": [name for name, _, _ in settings.memory_tables],
    }
