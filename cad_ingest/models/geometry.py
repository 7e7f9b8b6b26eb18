"""
几何模型 - 点与轴对齐边界框

职责：
1. Point / BoundingBox 数据结构
2. 边界框构造、合并（merge）、扩展（expand）
3. 圆弧边界框的角度规则（端点 + 扫掠范围内的坐标轴交点）

约定：
- merge/expand 返回新对象，满足交换律、结合律且只扩不缩
- 空点集没有边界框（返回 None）

测试要点：
- test_merge_commutative: 合并交换律
- test_merge_associative: 合并结合律
- test_arc_bbox_half_circle: 0°→180° 半圆
- test_arc_bbox_wraparound: 跨 0° 的圆弧
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from pydantic import BaseModel

# 坐标轴交点的单位向量，避免 cos(90°) 之类的浮点噪声
_CARDINALS: tuple[tuple[float, float, float], ...] = (
    (0.0, 1.0, 0.0),
    (90.0, 0.0, 1.0),
    (180.0, -1.0, 0.0),
    (270.0, 0.0, -1.0),
)


class Point(BaseModel):
    """三维点"""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)


class BoundingBox(BaseModel):
    """轴对齐边界框"""
    min: Point
    max: Point

    @classmethod
    def from_point(cls, point: Point) -> BoundingBox:
        """单点退化框"""
        return cls(min=point.model_copy(), max=point.model_copy())

    @classmethod
    def from_points(cls, points: Iterable[Point]) -> BoundingBox | None:
        """点集外接框（空点集返回 None）"""
        box: BoundingBox | None = None
        for p in points:
            box = cls.from_point(p) if box is None else box.expand(p)
        return box

    @classmethod
    def from_corners(cls, x1: float, y1: float, x2: float, y2: float, z: float = 0.0) -> BoundingBox:
        """两个角点构造（自动排序）"""
        return cls(
            min=Point(x=min(x1, x2), y=min(y1, y2), z=z),
            max=Point(x=max(x1, x2), y=max(y1, y2), z=z),
        )

    @property
    def width(self) -> float:
        return self.max.x - self.min.x

    @property
    def height(self) -> float:
        return self.max.y - self.min.y

    def expand(self, point: Point) -> BoundingBox:
        """扩展以包含一个点"""
        return BoundingBox(
            min=Point(
                x=min(self.min.x, point.x),
                y=min(self.min.y, point.y),
                z=min(self.min.z, point.z),
            ),
            max=Point(
                x=max(self.max.x, point.x),
                y=max(self.max.y, point.y),
                z=max(self.max.z, point.z),
            ),
        )

    def merge(self, other: BoundingBox) -> BoundingBox:
        """合并两个边界框"""
        return self.expand(other.min).expand(other.max)

    def intersects(self, other: BoundingBox) -> bool:
        """判断（XY 平面）是否相交"""
        return not (
            self.max.x < other.min.x or
            self.min.x > other.max.x or
            self.max.y < other.min.y or
            self.min.y > other.max.y
        )


def merge_boxes(boxes: Iterable[BoundingBox | None]) -> BoundingBox | None:
    """合并一组可能为空的边界框"""
    merged: BoundingBox | None = None
    for box in boxes:
        if box is None:
            continue
        merged = box if merged is None else merged.merge(box)
    return merged


def normalize_angle(angle: float) -> float:
    """角度归一化到 [0, 360)"""
    normalized = angle % 360.0
    # -1e-15 % 360 会得到 360.0
    return 0.0 if normalized >= 360.0 else normalized


def angle_in_sweep(angle: float, start: float, end: float) -> bool:
    """
    判断角度是否落在逆时针扫掠范围 [start, end] 内（含端点）

    start > end（归一化后）表示扫掠跨过 0°；
    原始跨度达到整圈（如 0→360）时视为覆盖所有角度。
    """
    if abs(end - start) >= 360.0:
        return True

    a = normalize_angle(angle)
    s = normalize_angle(start)
    e = normalize_angle(end)

    if s <= e:
        return s <= a <= e
    return a >= s or a <= e


def arc_point(center: Point, radius: float, angle_deg: float) -> Point:
    """圆弧上指定角度处的点"""
    rad = math.radians(angle_deg)
    return Point(
        x=center.x + radius * math.cos(rad),
        y=center.y + radius * math.sin(rad),
        z=center.z,
    )


def arc_bounding_box(center: Point, radius: float, start_angle: float, end_angle: float) -> BoundingBox:
    """
    圆弧边界框

    极值点只可能出现在两个端点或坐标轴交点（0°/90°/180°/270°），
    因此取端点与扫掠范围内的轴交点做外接框。
    """
    box = BoundingBox.from_point(arc_point(center, radius, start_angle))
    box = box.expand(arc_point(center, radius, end_angle))
    for angle, ux, uy in _CARDINALS:
        if angle_in_sweep(angle, start_angle, end_angle):
            box = box.expand(
                Point(x=center.x + radius * ux, y=center.y + radius * uy, z=center.z)
            )
    return box
