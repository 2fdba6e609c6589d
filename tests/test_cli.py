"""
CLI のテスト
"""

import io
import json
from unittest.mock import patch

import pytest

from lambcrud.cli import main


class TestInvokeCommand:
    """invoke コマンドのテスト"""

    def run(self, argv, stdin_text=None):
        stdout, stderr = io.StringIO(), io.StringIO()
        stdin = io.StringIO(stdin_text or "")
        with patch("sys.stdout", stdout), patch("sys.stderr", stderr), patch("sys.stdin", stdin):
            with patch("lambcrud.cli.configure_logging"):
                code = main(argv)
        return code, stdout.getvalue(), stderr.getvalue()

    def test_echo_from_stdin(self):
        """標準入力のエンベロープを実行"""
        code, out, _ = self.run(
            ["invoke", "--backend", "memory"],
            json.dumps({"operation": "echo", "payload": {"somekey1": "somevalue1"}}),
        )

        assert code == 0
        assert json.loads(out) == {"somekey1": "somevalue1"}

    def test_create_from_file(self, tmp_path):
        """ファイルのエンベロープを実行"""
        envelope = tmp_path / "input.json"
        envelope.write_text(
            json.dumps(
                {
                    "operation": "create",
                    "tableName": "lambda-apigateway",
                    "payload": {"Item": {"id": "1", "name": "Sam"}},
                }
            ),
            encoding="utf-8",
        )

        code, out, _ = self.run(
            ["invoke", str(envelope), "--backend", "memory", "--table", "lambda-apigateway:id"]
        )

        assert code == 0
        assert json.loads(out) == {}

    def test_error_is_reported(self):
        """エラーは stderr に出力して終了コード 1"""
        code, out, err = self.run(
            ["invoke", "--backend", "memory"], json.dumps({"operation": "list"})
        )

        assert code == 1
        assert out == ""
        body = json.loads(err)
        assert body["error"] == "UNRECOGNIZED_OPERATION"
        assert body["details"]["operation"] == "list"

    @pytest.mark.parametrize("text", ["[]", '"hello"', "null", "5"])
    def test_non_object_envelope(self, text):
        """オブジェクトでない入力は MALFORMED_REQUEST として報告"""
        code, out, err = self.run(["invoke", "--backend", "memory"], text)

        assert code == 1
        assert out == ""
        assert json.loads(err)["error"] == "MALFORMED_REQUEST"

    def test_invalid_json(self):
        """JSON でない入力"""
        code, _, err = self.run(["invoke", "--backend", "memory"], "{broken")

        assert code == 1
        assert "入力を読み込めません" in err

    def test_missing_file(self, tmp_path):
        """存在しないファイル"""
        code, _, _ = self.run(["invoke", str(tmp_path / "nope.json"), "--backend", "memory"])
        assert code == 1

    def test_invalid_table_spec(self):
        """不正なテーブル定義は設定エラー"""
        code, _, err = self.run(["invoke", "--backend", "memory", "--table", "broken"], "{}")

        assert code == 1
        assert "Invalid table spec" in err


class TestServeCommand:
    """serve コマンドのテスト"""

    def test_serve_starts_server(self):
        """設定からハンドラーを作ってサーバーを起動"""
        with patch("lambcrud.cli.start_server") as start_server:
            code = main(["serve", "--backend", "memory", "--port", "9999", "--table", "t:id"])

        assert code == 0
        handler, host, port = start_server.call_args[0]
        assert (host, port) == ("localhost", 9999)
        assert handler({"operation": "read", "tableName": "t", "payload": {"Key": {"id": "x"}}}, None) == {}


def test_no_command_prints_help(capsys):
    """コマンドなしはヘルプを表示"""
    assert main([]) == 0
    assert "lambcrud" in capsys.readouterr().out
