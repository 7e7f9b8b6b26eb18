"""
持久化行模型 - 持久化网关读写的图层行与实体行
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from .geometry import BoundingBox
from .result import ParsedDrawing


class StoredEntity(BaseModel):
    """实体行：类型标签 + 结构化数据 + 边界框 + 所属图层"""
    seq: int = Field(0, description="文档内顺序")
    entity_type: str
    layer: str
    data: dict[str, Any] = Field(default_factory=dict)
    bounding_box: BoundingBox | None = None


class StoredLayer(BaseModel):
    """图层行：属性 + 聚合边界框 + 所属文件"""
    file_id: str
    name: str
    is_locked: bool = False
    is_visible: bool = True
    color: str | None = None
    line_type: str | None = None
    line_weight: str | None = None
    bounding_box: BoundingBox | None = None


def to_stored_rows(
    file_id: str, drawing: ParsedDrawing
) -> tuple[list[StoredLayer], list[StoredEntity]]:
    """将解析产物展开为持久化行"""
    layer_rows = [
        StoredLayer(
            file_id=file_id,
            bounding_box=layer.bounding_box,
            **layer.info.model_dump(),
        )
        for layer in drawing.layers
    ]
    entity_rows = [
        StoredEntity(
            seq=seq,
            entity_type=entity.type,
            layer=entity.layer,
            data=entity.to_payload(),
            bounding_box=entity.bounding_box(),
        )
        for seq, entity in enumerate(drawing.result.entities)
    ]
    return layer_rows, entity_rows
