"""
解析结果模型

- ParseResult: 实体列表（文档顺序）、图层名（字母序）、总边界框、不支持的实体类型
- ParsedDrawing: ParseResult + 完整图层表（含默认图层 "0"）
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from .entity import ParsedEntity
from .geometry import BoundingBox, merge_boxes
from .layer import ParsedLayer


class ParseResult(BaseModel):
    """单次解析的完整输出"""
    entities: list[ParsedEntity] = Field(default_factory=list)
    layers: list[str] = Field(default_factory=list, description="实体引用的图层名（排序去重）")
    bounding_box: BoundingBox | None = None
    unsupported_entity_types: list[str] = Field(default_factory=list)

    @classmethod
    def build(
        cls,
        entities: list[ParsedEntity],
        unsupported_entity_types: list[str] | None = None,
    ) -> ParseResult:
        """由实体列表汇总图层名与总边界框"""
        return cls(
            entities=entities,
            layers=sorted({e.layer for e in entities}),
            bounding_box=merge_boxes(e.bounding_box() for e in entities),
            unsupported_entity_types=list(unsupported_entity_types or []),
        )


class ParsedDrawing(BaseModel):
    """解析产物：结果 + 图层表"""
    result: ParseResult
    layers: list[ParsedLayer] = Field(default_factory=list)

    def layer_names(self) -> list[str]:
        return [layer.name for layer in self.layers]

    def get_layer(self, name: str) -> ParsedLayer | None:
        for layer in self.layers:
            if layer.name == name:
                return layer
        return None
