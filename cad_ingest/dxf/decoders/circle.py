"""
CIRCLE 解码器

组码：8 图层 / 10,20,30 圆心 / 40 半径
"""

from __future__ import annotations

from ...models import CircleEntity
from ..tokenizer import RecordCursor, RecordGroup
from .base import EntityDecoder


class CircleDecoder(EntityDecoder):
    entity_type = "CIRCLE"

    def decode(self, group: RecordGroup, cursor: RecordCursor) -> CircleEntity:
        return CircleEntity(
            layer=self.read_layer(group),
            center=self.read_point(group),
            radius=group.get_float(40),
        )
