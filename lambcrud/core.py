"""
App メインクラス

Lambda イベントを受け取り、ディスパッチャーに渡して結果を返すコアクラスです。
"""

import logging
from typing import Dict, Any, Optional

from .backend.base import DataAccess
from .dispatcher import Dispatcher
from .envelope import Envelope, is_proxy_event
from .error_handlers import ErrorHandler, ErrorHandlerRegistry
from .json_handler import JSONHandler
from .response import Response

logger = logging.getLogger(__name__)


class App:
    """1 回の Lambda 呼び出しを処理する"""

    def __init__(self, event: Any, context: Any, data_access: DataAccess):
        self.event = event
        self.context = context
        self.dispatcher = Dispatcher(data_access)
        self._error_registry = ErrorHandlerRegistry()

    @property
    def request_id(self) -> Optional[str]:
        return getattr(self.context, "aws_request_id", None) if self.context else None

    def add_error_handler(self, error_handler: ErrorHandler) -> None:
        """エラーハンドラーを追加"""
        self._error_registry.merge(error_handler._registry)

    def invoke(self) -> Any:
        """直接呼び出し（非プロキシ統合）

        エラーはそのまま Lambda ランタイムに伝播します。
        """
        envelope = Envelope.from_event(self.event)
        return self.dispatcher.dispatch(envelope)

    def handle_request(self) -> Dict[str, Any]:
        """プロキシ統合のリクエスト処理"""
        try:
            result = self.invoke()
        except Exception as e:
            logger.warning(f"リクエスト失敗 (request_id={self.request_id}): {e}")
            error_response = self._error_registry.handle_error(e, self.event, self.context)
            return error_response.to_lambda_response()

        response = Response(
            JSONHandler.dumps(result), headers={"Content-Type": "application/json"}
        )
        return response.to_lambda_response()

    def run(self) -> Any:
        """イベントの形に応じて invoke / handle_request を選択"""
        if is_proxy_event(self.event):
            return self.handle_request()
        return self.invoke()
