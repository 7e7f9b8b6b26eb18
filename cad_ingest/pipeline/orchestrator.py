"""
解析编排器 - 单飞获取 + 后台执行

状态机：uploaded → parsing → {parsed, failed}；parsed/failed 可再次进入 parsing（重新解析整体覆盖）。

职责：
1. 单飞获取：委托持久化网关的条件更新，同一文件同一时刻最多一个解析
2. 后台执行：获取成功后提交到线程池，请求立即返回
3. 遗留 parsing 状态按 timeouts.parse_stale_sec 超时回收

测试要点：
- test_concurrent_requests_single_flight: 并发请求只有一个被接受
- test_reparse_replaces_results: 重新解析整体替换
- test_unknown_file: 未登记文件
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_futures

from pydantic import BaseModel

from ..config import get_config
from ..interfaces import IContentDecoder, IContentProvider, IParseStore
from ..models import FileRecord, ParsedDrawing, ParseStatus
from .executor import ParsePipeline

logger = logging.getLogger(__name__)


class ParseRequestResult(BaseModel):
    """解析请求的受理结果"""

    file_id: str
    accepted: bool
    status: ParseStatus
    message: str = ""


class ParseOrchestrator:
    """解析编排器"""

    def __init__(
        self,
        store: IParseStore,
        provider: IContentProvider,
        decoder: IContentDecoder | None = None,
        max_workers: int | None = None,
        stale_after_sec: float | None = None,
    ):
        config = get_config()
        self.store = store
        self.pipeline = ParsePipeline(store, provider, decoder)
        self.stale_after_sec = (
            stale_after_sec if stale_after_sec is not None else config.timeouts.parse_stale_sec
        )
        self.wait_sec = config.timeouts.wait_sec
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers or config.concurrency.max_workers,
            thread_name_prefix="cad-parse",
        )
        self._futures: dict[str, Future] = {}
        self._lock = threading.Lock()

    def request_parse(self, file_id: str) -> ParseRequestResult:
        """
        请求解析（立即返回）

        Raises:
            UnknownFileError: 文件未登记
            RuntimeError: 执行器已关闭（文件状态置为 failed）
        """
        if not self._acquire(file_id):
            return ParseRequestResult(
                file_id=file_id,
                accepted=False,
                status=ParseStatus.PARSING,
                message="解析已在进行中",
            )

        try:
            future = self._executor.submit(self.pipeline.execute, file_id)
        except RuntimeError as e:
            # 已获取 parsing 但任务未能提交，释放状态避免卡死
            logger.error(f"[{file_id}] 解析任务提交失败: {e}")
            self.store.set_status(file_id, ParseStatus.FAILED, str(e))
            raise
        with self._lock:
            self._futures[file_id] = future
        future.add_done_callback(lambda f: self._discard(file_id, f))
        logger.info(f"[{file_id}] 解析任务已提交")
        return ParseRequestResult(
            file_id=file_id,
            accepted=True,
            status=ParseStatus.PARSING,
            message="解析已开始",
        )

    def parse_now(self, file_id: str) -> ParsedDrawing | None:
        """同步解析；已有解析进行中时返回 None"""
        if not self._acquire(file_id):
            logger.info(f"[{file_id}] 解析已在进行中，跳过")
            return None
        return self.pipeline.execute(file_id)

    def wait(self, file_id: str, timeout: float | None = None) -> FileRecord | None:
        """等待该文件最近一次后台解析结束，返回最新状态记录"""
        with self._lock:
            future = self._futures.get(file_id)
        if future is not None:
            wait_futures([future], timeout=timeout if timeout is not None else self.wait_sec)
        return self.store.get_file(file_id)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> ParseOrchestrator:
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()

    def _acquire(self, file_id: str) -> bool:
        return self.store.try_mark_parsing(file_id, self.stale_after_sec)

    def _discard(self, file_id: str, future: Future) -> None:
        with self._lock:
            if self._futures.get(file_id) is future:
                del self._futures[file_id]
