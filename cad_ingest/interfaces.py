"""
模块接口契约 - 定义各模块的抽象接口

设计原则：
1. 模块间通过接口通信，不直接依赖具体实现
2. 每个接口定义清晰的输入输出类型
3. 便于单元测试和mock替换

使用方式：
    from cad_ingest.interfaces import IContentProvider

    class MyProvider(IContentProvider):
        def read(self, file_id: str) -> bytes:
            ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .dxf.tokenizer import RecordCursor, RecordGroup
    from .models import (
        FileRecord,
        ParsedEntity,
        ParseStatus,
        StoredEntity,
        StoredLayer,
    )


# ============================================================================
# DXF 解析模块接口
# ============================================================================

class IEntityDecoder(ABC):
    """实体解码器接口 - 每种实体类型一个实现"""

    # 处理的实体类型名（0 组码的值，如 "LINE"）
    entity_type: str

    @abstractmethod
    def decode(self, group: RecordGroup, cursor: RecordCursor) -> ParsedEntity | None:
        """
        解码单个实体

        Args:
            group: 实体自身的分组码（到下一个 0 组码为止，不含）
            cursor: 记录游标，指向实体之后的下一条记录；
                    需要吞并后续子对象（如 VERTEX/SEQEND）的解码器可继续推进

        Returns:
            解析后的实体；无有效几何时返回 None（实体被丢弃）
        """
        ...


class IContentDecoder(ABC):
    """内容解码器接口 - 原始字节转文本（编码识别由实现负责）"""

    @abstractmethod
    def decode(self, data: bytes) -> str:
        """
        字节解码为文本

        Raises:
            DecodeError: 无法解码
        """
        ...


# ============================================================================
# 存储模块接口
# ============================================================================

class IContentProvider(ABC):
    """原始内容提供者接口"""

    @abstractmethod
    def read(self, file_id: str) -> bytes:
        """
        读取已存储的原始文件内容

        Raises:
            ContentReadError: 读取失败
        """
        ...


class IParseStore(ABC):
    """持久化网关接口 - 文件解析状态与解析结果"""

    @abstractmethod
    def register_file(self, file_id: str, name: str = "") -> FileRecord:
        """登记文件（初始状态 uploaded）"""
        ...

    @abstractmethod
    def get_file(self, file_id: str) -> FileRecord | None:
        """获取文件状态记录"""
        ...

    @abstractmethod
    def try_mark_parsing(self, file_id: str, stale_after_sec: float | None = None) -> bool:
        """
        单飞获取：仅当当前状态不是 parsing 时原子地置为 parsing

        Args:
            file_id: 文件ID
            stale_after_sec: parsing 状态超过该秒数视为遗留，可被重新获取

        Returns:
            是否获取成功

        Raises:
            UnknownFileError: 文件不存在
        """
        ...

    @abstractmethod
    def set_status(self, file_id: str, status: ParseStatus, error: str | None = None) -> None:
        """设置解析状态（failed 时附带错误信息）"""
        ...

    @abstractmethod
    def replace_parse_results(
        self,
        file_id: str,
        layers: list[StoredLayer],
        entities: list[StoredEntity],
    ) -> None:
        """
        事务性替换解析结果

        删除旧图层/实体 → 写入新结果 → 状态置为 parsed 并清除错误，全部在同一事务内。

        Raises:
            PersistenceError: 写入失败（事务已回滚，旧结果保持不变）
        """
        ...

    @abstractmethod
    def get_layers(self, file_id: str) -> list[StoredLayer]:
        """读取图层行（按名称排序）"""
        ...

    @abstractmethod
    def get_entities(self, file_id: str) -> list[StoredEntity]:
        """读取实体行（按文档顺序）"""
        ...

    @abstractmethod
    def reset_status(self, file_id: str) -> None:
        """人工复位卡在 parsing 的文件（置回 uploaded）"""
        ...


# ============================================================================
# 异常定义
# ============================================================================

class CadIngestError(Exception):
    """基础异常"""
    pass


class ContentReadError(CadIngestError):
    """原始内容读取错误"""
    pass


class DecodeError(CadIngestError):
    """文本解码错误"""
    pass


class PersistenceError(CadIngestError):
    """持久化错误"""
    pass


class UnknownFileError(CadIngestError, LookupError):
    """文件不存在"""
    pass
