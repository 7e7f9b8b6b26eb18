"""
文件模型 - 解析状态与生命周期

状态流转：
    uploaded → parsing → parsed / failed
    parsed / failed → parsing（重新解析，整体覆盖旧结果）
"""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum

from pydantic import BaseModel, Field


class ParseStatus(str, Enum):
    """解析状态枚举"""
    UPLOADED = "uploaded"
    PARSING = "parsing"
    PARSED = "parsed"
    FAILED = "failed"


class FileRecord(BaseModel):
    """文件解析状态记录"""
    file_id: str = Field(..., description="文件ID")
    name: str = ""

    status: ParseStatus = ParseStatus.UPLOADED
    parse_error: str | None = None

    # 时间戳
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
    parse_started_at: datetime | None = None
    parsed_at: datetime | None = None

    def mark_parsing(self) -> None:
        """标记为解析中"""
        self.status = ParseStatus.PARSING
        self.parse_started_at = datetime.now()
        self.updated_at = self.parse_started_at

    def mark_parsed(self) -> None:
        """标记为解析成功（清除旧错误）"""
        self.status = ParseStatus.PARSED
        self.parse_error = None
        self.parsed_at = datetime.now()
        self.updated_at = self.parsed_at

    def mark_failed(self, error: str) -> None:
        """标记为失败"""
        self.status = ParseStatus.FAILED
        self.parse_error = error
        self.updated_at = datetime.now()

    def is_stale(self, max_age_sec: float | None) -> bool:
        """解析中状态是否已超时（视为进程崩溃遗留）"""
        if self.status != ParseStatus.PARSING or max_age_sec is None:
            return False
        if self.parse_started_at is None:
            return True
        return datetime.now() - self.parse_started_at > timedelta(seconds=max_age_sec)
