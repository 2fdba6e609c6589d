"""
デプロイ用の Lambda エントリーポイント

関数のハンドラーに lambcrud.handler.lambda_handler を指定します。
データアクセス層は環境変数（LAMBCRUD_*）から初回呼び出し時に構築されます。
"""

from .utils import create_lambda_handler

lambda_handler = create_lambda_handler()
