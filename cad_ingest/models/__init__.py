"""
数据模型层 - 定义系统核心数据结构

所有模块通过这些模型交互，实现解耦：
- Point / BoundingBox: 几何基础
- ParsedEntity: 已解析实体（LINE/POLYLINE/ARC/CIRCLE/TEXT/INSERT）
- LayerInfo / ParsedLayer: 图层属性与聚合
- ParseResult / ParsedDrawing: 解析产物
- FileRecord / ParseStatus: 文件解析生命周期
- StoredLayer / StoredEntity: 持久化行
"""

from .entity import (
    DEFAULT_LAYER,
    ArcEntity,
    CircleEntity,
    InsertEntity,
    LineEntity,
    ParsedEntity,
    PolylineEntity,
    TextEntity,
)
from .file import FileRecord, ParseStatus
from .geometry import BoundingBox, Point, merge_boxes
from .layer import LayerInfo, ParsedLayer
from .result import ParsedDrawing, ParseResult
from .stored import StoredEntity, StoredLayer, to_stored_rows

__all__ = [
    "Point",
    "BoundingBox",
    "merge_boxes",
    "DEFAULT_LAYER",
    "ParsedEntity",
    "LineEntity",
    "PolylineEntity",
    "ArcEntity",
    "CircleEntity",
    "TextEntity",
    "InsertEntity",
    "LayerInfo",
    "ParsedLayer",
    "ParseResult",
    "ParsedDrawing",
    "FileRecord",
    "ParseStatus",
    "StoredLayer",
    "StoredEntity",
    "to_stored_rows",
]
