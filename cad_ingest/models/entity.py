"""
实体模型 - 已解析实体的封闭联合类型

每个变体携带几何字段与图层名（默认 "0"），并提供：
- bounding_box(): 派生边界框（空折线为 None）
- to_payload(): 持久化用的结构化数据（不含图层名）

近似说明：
- TEXT 宽度按 len(content) * height * 0.6 估算，并非真实字形宽度
- INSERT 不展开块内容，边界框退化为插入点
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

from .geometry import BoundingBox, Point, arc_bounding_box

DEFAULT_LAYER = "0"

# 文字宽度估算系数（字符宽 ≈ 0.6 倍字高）
TEXT_WIDTH_FACTOR = 0.6


class _EntityBase(BaseModel):
    layer: str = DEFAULT_LAYER

    def to_payload(self) -> dict[str, Any]:
        """实体结构化数据（用于持久化）"""
        return self.model_dump(mode="json", exclude={"type", "layer"})


class LineEntity(_EntityBase):
    """直线"""
    type: Literal["LINE"] = "LINE"
    start: Point = Field(default_factory=Point)
    end: Point = Field(default_factory=Point)

    def bounding_box(self) -> BoundingBox | None:
        return BoundingBox.from_points([self.start, self.end])


class PolylineEntity(_EntityBase):
    """多段线（POLYLINE / LWPOLYLINE）"""
    type: Literal["POLYLINE"] = "POLYLINE"
    vertices: list[Point] = Field(default_factory=list)
    is_closed: bool = False

    def bounding_box(self) -> BoundingBox | None:
        return BoundingBox.from_points(self.vertices)


class ArcEntity(_EntityBase):
    """圆弧（角度单位：度，逆时针）"""
    type: Literal["ARC"] = "ARC"
    center: Point = Field(default_factory=Point)
    radius: float = 0.0
    start_angle: float = 0.0
    end_angle: float = 360.0

    def bounding_box(self) -> BoundingBox | None:
        return arc_bounding_box(self.center, self.radius, self.start_angle, self.end_angle)


class CircleEntity(_EntityBase):
    """圆"""
    type: Literal["CIRCLE"] = "CIRCLE"
    center: Point = Field(default_factory=Point)
    radius: float = 0.0

    def bounding_box(self) -> BoundingBox | None:
        c, r = self.center, self.radius
        # 负半径（宽松解析保留原值）时角点自动排序
        return BoundingBox.from_corners(c.x - r, c.y - r, c.x + r, c.y + r, z=c.z)


class TextEntity(_EntityBase):
    """单行/多行文字"""
    type: Literal["TEXT"] = "TEXT"
    position: Point = Field(default_factory=Point)
    content: str = ""
    height: float = 0.0

    @property
    def estimated_width(self) -> float:
        return len(self.content) * self.height * TEXT_WIDTH_FACTOR

    def bounding_box(self) -> BoundingBox | None:
        p = self.position
        return BoundingBox.from_corners(
            p.x, p.y, p.x + self.estimated_width, p.y + self.height, z=p.z
        )


class InsertEntity(_EntityBase):
    """块参照"""
    type: Literal["INSERT"] = "INSERT"
    position: Point = Field(default_factory=Point)
    block_name: str = ""
    scale_x: float = 1.0
    scale_y: float = 1.0
    scale_z: float = 1.0
    rotation: float = 0.0

    def bounding_box(self) -> BoundingBox | None:
        return BoundingBox.from_point(self.position)


ParsedEntity = Annotated[
    Union[LineEntity, PolylineEntity, ArcEntity, CircleEntity, TextEntity, InsertEntity],
    Field(discriminator="type"),
]
