"""
設定のテスト
"""

import logging

import pytest

from lambcrud.backend.dynamodb import DynamoDBDataAccess
from lambcrud.backend.memory import InMemoryDataAccess
from lambcrud.config import (
    Settings,
    build_data_access,
    configure_logging,
    parse_table_spec,
    parse_table_specs,
)
from lambcrud.exceptions import ConfigError


class TestSettings:
    """Settings のテスト"""

    def test_defaults(self):
        """環境変数がない場合の既定値"""
        settings = Settings.from_env({})

        assert settings.backend == "dynamodb"
        assert settings.region_name is None
        assert settings.endpoint_url is None
        assert settings.log_level == "INFO"
        assert settings.memory_tables == []

    def test_from_env(self):
        """環境変数から読み込み"""
        settings = Settings.from_env(
            {
                "LAMBCRUD_BACKEND": "Memory",
                "AWS_REGION": "ap-northeast-1",
                "LAMBCRUD_DYNAMODB_ENDPOINT": "http://localhost:8000",
                "LAMBCRUD_LOG_LEVEL": "debug",
                "LAMBCRUD_MEMORY_TABLES": "users:id, events:pk:sk",
            }
        )

        assert settings.backend == "memory"
        assert settings.region_name == "ap-northeast-1"
        assert settings.endpoint_url == "http://localhost:8000"
        assert settings.log_level == "DEBUG"
        assert settings.memory_tables == [("users", "id", None), ("events", "pk", "sk")]

    def test_default_region_fallback(self):
        """AWS_DEFAULT_REGION へのフォールバック"""
        settings = Settings.from_env({"AWS_DEFAULT_REGION": "us-west-2"})
        assert settings.region_name == "us-west-2"

    def test_unknown_backend(self):
        """未知のバックエンド"""
        with pytest.raises(ConfigError) as exc_info:
            Settings(backend="redis")
        assert exc_info.value.details["setting"] == "backend"

    def test_unknown_log_level(self):
        """未知のログレベル"""
        with pytest.raises(ConfigError):
            Settings(log_level="LOUD")


class TestTableSpecs:
    """テーブル定義のパース"""

    def test_parse_table_spec(self):
        assert parse_table_spec("users:id") == ("users", "id", None)
        assert parse_table_spec("events:pk:sk") == ("events", "pk", "sk")

    @pytest.mark.parametrize("spec", ["users", "users:", ":id", "a:b:c:d", "a::c"])
    def test_invalid_table_spec(self, spec):
        with pytest.raises(ConfigError):
            parse_table_spec(spec)

    def test_parse_table_specs(self):
        assert parse_table_specs("") == []
        assert parse_table_specs("a:id,,b:id") == [("a", "id", None), ("b", "id", None)]


class TestBuildDataAccess:
    """build_data_access のテスト"""

    def test_memory(self):
        """memory バックエンドはテーブルを作成済みで返す"""
        data_access = build_data_access(
            Settings(backend="memory", memory_tables=[("users", "id", None)])
        )

        assert isinstance(data_access, InMemoryDataAccess)
        assert data_access.table_names() == ["users"]

    def test_dynamodb(self, monkeypatch):
        """dynamodb バックエンド"""
        monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
        monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")

        data_access = build_data_access(
            Settings(region_name="us-east-1", endpoint_url="http://localhost:8000")
        )

        assert isinstance(data_access, DynamoDBDataAccess)


class TestConfigureLogging:
    """ログ設定のテスト"""

    def test_sets_package_logger_level(self):
        configure_logging("DEBUG")
        assert logging.getLogger("lambcrud").level == logging.DEBUG

        configure_logging("WARNING")
        assert logging.getLogger("lambcrud").level == logging.WARNING
