"""
实体解码器基类 - 公共字段读取
"""

from __future__ import annotations

from ...interfaces import IEntityDecoder
from ...models import DEFAULT_LAYER, Point
from ..tokenizer import RecordGroup


class EntityDecoder(IEntityDecoder):
    """解码器公共实现（图层名 / 坐标点读取）"""

    entity_type = ""

    @staticmethod
    def read_layer(group: RecordGroup) -> str:
        """组码 8：图层名（缺省或空值时为 "0"）"""
        return group.get_str(8) or DEFAULT_LAYER

    @staticmethod
    def read_point(group: RecordGroup, x_code: int = 10) -> Point:
        """读取 x/y/z 三个组码（x_code, x_code+10, x_code+20）"""
        return Point(
            x=group.get_float(x_code),
            y=group.get_float(x_code + 10),
            z=group.get_float(x_code + 20),
        )
