"""
LINE 解码器

组码：8 图层 / 10,20,30 起点 / 11,21,31 终点
"""

from __future__ import annotations

from ...models import LineEntity
from ..tokenizer import RecordCursor, RecordGroup
from .base import EntityDecoder


class LineDecoder(EntityDecoder):
    entity_type = "LINE"

    def decode(self, group: RecordGroup, cursor: RecordCursor) -> LineEntity:
        return LineEntity(
            layer=self.read_layer(group),
            start=self.read_point(group, 10),
            end=self.read_point(group, 11),
        )
