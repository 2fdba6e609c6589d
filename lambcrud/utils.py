"""
ユーティリティ関数

Lambda ハンドラーのヘルパー関数を提供します。
"""

import logging
import threading
from typing import Dict, Any, Callable, Optional

from .backend.base import DataAccess
from .config import Settings, build_data_access, configure_logging, describe
from .core import App
from .error_handlers import ErrorHandler

logger = logging.getLogger(__name__)


def create_lambda_handler(
    data_access: Optional[DataAccess] = None,
    settings: Optional[Settings] = None,
    error_handler: Optional[ErrorHandler] = None,
) -> Callable[[Dict[str, Any], Any], Any]:
    """Lambda 用のハンドラーを作成

    Args:
        data_access: 使用するデータアクセス層（None の場合は設定から初回呼び出し時に構築）
        settings: 設定（None の場合は環境変数から読み込み）
        error_handler: プロキシ統合で使うカスタムエラーハンドラー

    Returns:
        Lambda ハンドラー関数
    """
    lock = threading.Lock()
    state: Dict[str, Any] = {"data_access": data_access}

    def get_data_access() -> DataAccess:
        with lock:
            if state["data_access"] is None:
                resolved = settings or Settings.from_env()
                configure_logging(resolved.log_level)
                logger.info(f"データアクセス層を初期化: {describe(resolved)}")
                state["data_access"] = build_data_access(resolved)
            return state["data_access"]

    def lambda_handler(event: Dict[str, Any], context: Any) -> Any:
        app = App(event, context, get_data_access())
        if error_handler is not None:
            app.add_error_handler(error_handler)
        return app.run()

    return lambda_handler
