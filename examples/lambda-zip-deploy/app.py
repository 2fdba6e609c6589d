"""
Lambda ZIP デプロイ用のサンプルアプリケーション

API Gateway の POST /DynamoDBManager から呼び出される関数です。
関数のハンドラーには app.lambda_handler を指定します。

環境変数:
    LAMBCRUD_LOG_LEVEL: ログレベル（デフォルト: INFO）
    ENVIRONMENT: development の場合はエラーの詳細を返す
"""

import os
import logging

from lambcrud import ErrorHandler, Response, Settings, create_lambda_handler

logger = logging.getLogger(__name__)

error_handler = ErrorHandler()


@error_handler.default
def handle_unknown_error(error, event, context):
    """予期しないエラー"""
    logger.error(f"Unhandled error: {error}", exc_info=error)

    body = {"error": "INTERNAL_ERROR", "message": "An unexpected error occurred"}
    if os.getenv("ENVIRONMENT") == "development":
        body["details"] = {"type": type(error).__name__, "message": str(error)}
    if context is not None:
        body["request_id"] = context.aws_request_id

    return Response(body, status_code=500)


lambda_handler = create_lambda_handler(
    settings=Settings.from_env(),
    error_handler=error_handler,
)
