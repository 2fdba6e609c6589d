"""
lambcrud ローカル開発サーバー

HTTP リクエストを API Gateway プロキシ統合のイベントに変換して
Lambda ハンドラーを呼び出します。
"""

import errno
import sys
import time
import uuid
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Callable, Dict
from urllib.parse import parse_qs, urlparse

from .json_handler import JSONHandler

LambdaHandler = Callable[[Dict[str, Any], Any], Any]


class LocalContext:
    """ローカル実行用の Lambda コンテキスト"""

    function_name = "local-function"
    function_version = "$LATEST"
    invoked_function_arn = "arn:aws:lambda:local:123456789012:function:local-function"
    memory_limit_in_mb = "128"
    log_group_name = "/aws/lambda/local-function"
    log_stream_name = "local-stream"

    def __init__(self, request_id: str = "") -> None:
        self.aws_request_id = request_id or str(uuid.uuid4())

    def get_remaining_time_in_millis(self) -> int:
        return 30000


def build_proxy_event(
    method: str,
    raw_path: str,
    headers: Dict[str, str],
    body: Any,
    source_ip: str = "127.0.0.1",
    request_id: str = "local-request-id",
) -> Dict[str, Any]:
    """API Gateway (REST) プロキシ統合のイベントを構築"""
    parsed_url = urlparse(raw_path)
    path = parsed_url.path

    # クエリパラメータを単一値に変換（Lambda の形式に合わせる）
    query_params = {key: values[0] for key, values in parse_qs(parsed_url.query).items()}

    return {
        "resource": path,
        "httpMethod": method,
        "path": path,
        "queryStringParameters": query_params or None,
        "headers": headers,
        "body": body,
        "requestContext": {
            "requestId": request_id,
            "stage": "local",
            "httpMethod": method,
            "path": path,
            "protocol": "HTTP/1.1",
            "requestTimeEpoch": int(time.time() * 1000),
            "identity": {
                "sourceIp": source_ip,
                "userAgent": headers.get("User-Agent", ""),
            },
        },
        "isBase64Encoded": False,
    }


class LambdaHTTPHandler(BaseHTTPRequestHandler):
    """HTTP リクエストを Lambda イベント形式に変換するハンドラー"""

    lambda_handler: LambdaHandler

    def do_POST(self) -> None:
        self._handle_request("POST")

    def do_GET(self) -> None:
        self._handle_request("GET")

    def do_PUT(self) -> None:
        self._handle_request("PUT")

    def do_DELETE(self) -> None:
        self._handle_request("DELETE")

    def _handle_request(self, method: str) -> None:
        """HTTP リクエストを処理"""
        content_length = int(self.headers.get("Content-Length", 0))
        body = self.rfile.read(content_length).decode("utf-8") if content_length > 0 else None

        context = LocalContext()
        event = build_proxy_event(
            method,
            self.path,
            dict(self.headers),
            body,
            source_ip=self.client_address[0],
            request_id=context.aws_request_id,
        )

        try:
            response = self.lambda_handler(event, context)
        except Exception as e:
            # ハンドラー自体が失敗した場合（API Gateway の 502 相当）
            print(f"Error handling request: {e}", file=sys.stderr)
            response = {
                "statusCode": 502,
                "headers": {"Content-Type": "application/json"},
                "body": JSONHandler.dumps({"message": "Internal server error"}),
            }

        status_code = response.get("statusCode", 200)
        headers = response.get("headers") or {}
        response_body = response.get("body", "")

        self.send_response(status_code)
        for header_name, header_value in headers.items():
            self.send_header(header_name, header_value)
        if "Content-Type" not in headers:
            self.send_header("Content-Type", "application/json")
        self.end_headers()

        if not isinstance(response_body, str):
            response_body = JSONHandler.dumps(response_body)
        self.wfile.write(response_body.encode("utf-8"))

        print(f"{method} {self.path} -> {status_code}")

    def log_message(self, format: str, *args: Any) -> None:
        """デフォルトのログ出力を無効化"""


def create_server(lambda_handler: LambdaHandler, host: str, port: int) -> ThreadingHTTPServer:
    """ハンドラーを組み込んだ HTTP サーバーを作成"""
    handler_class = type(
        "BoundLambdaHTTPHandler",
        (LambdaHTTPHandler,),
        {"lambda_handler": staticmethod(lambda_handler)},
    )
    return ThreadingHTTPServer((host, port), handler_class)


def start_server(lambda_handler: LambdaHandler, host: str = "localhost", port: int = 8000) -> None:
    """ローカルサーバーを起動"""
    try:
        httpd = create_server(lambda_handler, host, port)
    except OSError as e:
        if e.errno == errno.EADDRINUSE:
            print(f"❌ エラー: ポート {port} は既に使用されています")
        else:
            print(f"❌ サーバー起動エラー: {e}")
        sys.exit(1)

    print(
        f"""
🚀 lambcrud ローカルサーバーを起動しました
   URL: http://{host}:{port}

💡 使用例:
   curl -X POST http://{host}:{port}/DynamoDBManager \\
        -H "Content-Type: application/json" \\
        -d '{{"operation": "echo", "payload": {{"somekey1": "somevalue1"}}}}'

🛑 停止: Ctrl+C
"""
    )

    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        print("\n\n✋ サーバーを停止しました")
    finally:
        httpd.server_close()
