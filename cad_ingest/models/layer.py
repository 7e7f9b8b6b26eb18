"""
图层模型 - 图层属性与按图层聚合的实体
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from .entity import DEFAULT_LAYER, ParsedEntity
from .geometry import BoundingBox

# 未在图层表声明的图层所继承的默认样式
DEFAULT_LAYER_COLOR = "7"
DEFAULT_LINE_TYPE = "CONTINUOUS"


class LayerInfo(BaseModel):
    """图层属性（来自 LAYER 表）"""
    name: str = DEFAULT_LAYER
    is_locked: bool = False
    is_visible: bool = True
    color: str | None = None
    line_type: str | None = None
    line_weight: str | None = None

    @classmethod
    def default(cls, name: str = DEFAULT_LAYER) -> LayerInfo:
        """默认样式图层（未锁定/可见/白色/实线）"""
        return cls(name=name, color=DEFAULT_LAYER_COLOR, line_type=DEFAULT_LINE_TYPE)


class ParsedLayer(BaseModel):
    """图层 + 实体 + 聚合边界框"""
    info: LayerInfo
    entities: list[ParsedEntity] = Field(default_factory=list)
    bounding_box: BoundingBox | None = None

    @property
    def name(self) -> str:
        return self.info.name

    def add_entity(self, entity: ParsedEntity) -> None:
        """追加实体并合并其边界框"""
        self.entities.append(entity)
        box = entity.bounding_box()
        if box is None:
            return
        self.bounding_box = box if self.bounding_box is None else self.bounding_box.merge(box)
