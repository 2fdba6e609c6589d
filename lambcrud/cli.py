"""
lambcrud CLI ツール

ローカルサーバーの起動と、エンベロープ 1 件の直接実行を提供します。
"""

import argparse
import sys
from typing import Any, List, Optional

from .config import Settings, build_data_access, configure_logging, parse_table_spec
from .exceptions import APIError, create_error_response
from .json_handler import JSONHandler
from .local_server import LocalContext, start_server
from .utils import create_lambda_handler


def _add_backend_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--backend",
        choices=["dynamodb", "memory"],
        help="データアクセス層 (デフォルト: LAMBCRUD_BACKEND または dynamodb)",
    )
    parser.add_argument(
        "--table",
        action="append",
        default=[],
        metavar="NAME:HASH[:RANGE]",
        help="memory バックエンドに作成するテーブル (複数指定可)",
    )
    parser.add_argument("--endpoint-url", help="DynamoDB エンドポイント (DynamoDB Local など)")
    parser.add_argument("--region", help="AWS リージョン")
    parser.add_argument("--log-level", help="ログレベル")


def settings_from_args(args: argparse.Namespace) -> Settings:
    """環境変数の設定をコマンドライン引数で上書き"""
    settings = Settings.from_env()

    return Settings(
        backend=args.backend or settings.backend,
        region_name=args.region or settings.region_name,
        endpoint_url=args.endpoint_url or settings.endpoint_url,
        log_level=args.log_level or settings.log_level,
        memory_tables=settings.memory_tables + [parse_table_spec(t) for t in args.table],
    )


def _read_envelope(source: str) -> Any:
    if source == "-":
        text = sys.stdin.read()
    else:
        with open(source, "r", encoding="utf-8") as f:
            text = f.read()
    return JSONHandler.loads(text)


def invoke_command(args: argparse.Namespace) -> int:
    """エンベロープを直接呼び出しで実行して結果を出力"""
    settings = settings_from_args(args)
    configure_logging(settings.log_level)
    handler = create_lambda_handler(build_data_access(settings))

    try:
        event = _read_envelope(args.file)
    except (OSError, ValueError) as e:
        print(f"❌ 入力を読み込めません: {e}", file=sys.stderr)
        return 1

    context = LocalContext()
    try:
        result = handler(event, context)
    except APIError as e:
        error_body = create_error_response(e, context.aws_request_id)
        print(JSONHandler.dumps(error_body, indent=2), file=sys.stderr)
        return 1

    print(JSONHandler.dumps(result, indent=2))
    return 0


def serve_command(args: argparse.Namespace) -> int:
    """ローカルサーバーを起動"""
    settings = settings_from_args(args)
    configure_logging(settings.log_level)
    handler = create_lambda_handler(build_data_access(settings))
    start_server(handler, args.host, args.port)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """メイン CLI エントリーポイント"""
    parser = argparse.ArgumentParser(description="lambcrud CLI")
    subparsers = parser.add_subparsers(dest="command", help="利用可能なコマンド")

    # serve コマンド
    serve_parser = subparsers.add_parser("serve", help="ローカル開発サーバーを起動")
    serve_parser.add_argument("--host", default="localhost", help="バインドするホスト")
    serve_parser.add_argument("--port", type=int, default=8000, help="ポート番号")
    _add_backend_arguments(serve_parser)

    # invoke コマンド
    invoke_parser = subparsers.add_parser("invoke", help="エンベロープを 1 件実行")
    invoke_parser.add_argument(
        "file", nargs="?", default="-", help="エンベロープの JSON ファイル (- で標準入力)"
    )
    _add_backend_arguments(invoke_parser)

    args = parser.parse_args(argv)

    try:
        if args.command == "serve":
            return serve_command(args)
        elif args.command == "invoke":
            return invoke_command(args)
    except APIError as e:
        # 設定エラーなど
        print(f"❌ エラー: {e.message}", file=sys.stderr)
        return 1

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
