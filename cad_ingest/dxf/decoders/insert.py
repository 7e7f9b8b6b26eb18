"""
INSERT（块参照）解码器

组码：8 图层 / 2 块名 / 10,20,30 插入点 / 41,42,43 缩放 / 50 旋转角 / 66 属性跟随标志
块内容不展开，边界框退化为插入点。
"""

from __future__ import annotations

from ...models import InsertEntity
from ..tokenizer import RecordCursor, RecordGroup
from .base import EntityDecoder


class InsertDecoder(EntityDecoder):
    entity_type = "INSERT"

    def decode(self, group: RecordGroup, cursor: RecordCursor) -> InsertEntity:
        if group.get_int(66) == 1:
            self._skip_attributes(cursor)

        return InsertEntity(
            layer=self.read_layer(group),
            block_name=group.get_str(2, "") or "",
            position=self.read_point(group),
            scale_x=group.get_float(41, 1.0),
            scale_y=group.get_float(42, 1.0),
            scale_z=group.get_float(43, 1.0),
            rotation=group.get_float(50, 0.0),
        )

    @staticmethod
    def _skip_attributes(cursor: RecordCursor) -> None:
        """吞并跟随的 ATTRIB 对象及结尾 SEQEND"""
        while True:
            record = cursor.peek()
            if record is None:
                return
            if record.is_marker("ATTRIB"):
                cursor.advance()
                cursor.take_group()
            elif record.is_marker("SEQEND"):
                cursor.advance()
                cursor.take_group()
                return
            else:
                return
