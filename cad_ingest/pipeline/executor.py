"""
解析流水线执行器 - 单个文件的 读取 → 解码 → 解析 → 提交

职责：
1. 按顺序执行各阶段并记录阶段日志
2. 成功时事务性替换解析结果（同时置为 parsed）
3. 任一阶段失败时置为 failed 并记录错误信息

调用方负责在执行前完成单飞获取（try_mark_parsing）。

测试要点：
- test_execute_commits_results: 成功提交
- test_read_failure_marks_failed: 读取失败
- test_persistence_failure_keeps_previous: 持久化失败不留半成品
"""

from __future__ import annotations

import logging
import time

from ..dxf import ContentDecoder, DxfParser
from ..interfaces import IContentDecoder, IContentProvider, IParseStore
from ..models import ParsedDrawing, ParseStatus, to_stored_rows
from .stages import StageEnum

logger = logging.getLogger(__name__)


class ParsePipeline:
    """解析流水线执行器"""

    def __init__(
        self,
        store: IParseStore,
        provider: IContentProvider,
        decoder: IContentDecoder | None = None,
        parser: DxfParser | None = None,
    ):
        self.store = store
        self.provider = provider
        self.decoder = decoder or ContentDecoder()
        self.parser = parser or DxfParser()

    def execute(self, file_id: str) -> ParsedDrawing:
        """执行流水线（文件须已处于 parsing 状态）"""
        started = time.monotonic()
        try:
            self._enter(file_id, StageEnum.READ_CONTENT)
            raw = self.provider.read(file_id)

            self._enter(file_id, StageEnum.DECODE_TEXT)
            text = self.decoder.decode(raw)

            self._enter(file_id, StageEnum.PARSE_DXF)
            drawing = self.parser.parse(text)

            self._enter(file_id, StageEnum.COMMIT)
            layer_rows, entity_rows = to_stored_rows(file_id, drawing)
            self.store.replace_parse_results(file_id, layer_rows, entity_rows)

        except Exception as e:
            logger.exception(f"[{file_id}] 解析失败")
            self._mark_failed(file_id, str(e) or type(e).__name__)
            raise

        elapsed = time.monotonic() - started
        unsupported = drawing.result.unsupported_entity_types
        logger.info(
            f"[{file_id}] 解析完成: 实体{len(drawing.result.entities)}个, "
            f"图层{len(drawing.layers)}个, 耗时{elapsed:.2f}s"
            + (f", 跳过类型{unsupported}" if unsupported else "")
        )
        return drawing

    @staticmethod
    def _enter(file_id: str, stage: StageEnum) -> None:
        logger.info(f"[{file_id}] 开始阶段: {stage.value}")

    def _mark_failed(self, file_id: str, error: str) -> None:
        try:
            self.store.set_status(file_id, ParseStatus.FAILED, error)
        except Exception:
            # 状态写入也失败时只能留给超时回收
            logger.exception(f"[{file_id}] 写入失败状态出错")
