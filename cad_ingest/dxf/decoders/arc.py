"""
ARC 解码器

组码：8 图层 / 10,20,30 圆心 / 40 半径 / 50 起始角 / 51 终止角（度，逆时针）
缺省终止角为 360，即整圆。
"""

from __future__ import annotations

from ...models import ArcEntity
from ..tokenizer import RecordCursor, RecordGroup
from .base import EntityDecoder


class ArcDecoder(EntityDecoder):
    entity_type = "ARC"

    def decode(self, group: RecordGroup, cursor: RecordCursor) -> ArcEntity:
        return ArcEntity(
            layer=self.read_layer(group),
            center=self.read_point(group),
            radius=group.get_float(40),
            start_angle=group.get_float(50, 0.0),
            end_angle=group.get_float(51, 360.0),
        )
