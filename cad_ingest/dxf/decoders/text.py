"""
文字解码器 - TEXT / MTEXT

TEXT：8 图层 / 10,20,30 位置 / 40 字高 / 1 内容
MTEXT：8 图层 / 10,20,30 插入点 / 40 字高 / 3 内容分段（按顺序）+ 1 末段

两者都输出 TextEntity；边界框宽度按 len(content) * height * 0.6 估算。
"""

from __future__ import annotations

from ...models import TextEntity
from ..tokenizer import RecordCursor, RecordGroup
from .base import EntityDecoder


class TextDecoder(EntityDecoder):
    entity_type = "TEXT"

    def decode(self, group: RecordGroup, cursor: RecordCursor) -> TextEntity:
        return TextEntity(
            layer=self.read_layer(group),
            position=self.read_point(group),
            height=group.get_float(40),
            content=group.get_str(1, "") or "",
        )


class MTextDecoder(EntityDecoder):
    entity_type = "MTEXT"

    def decode(self, group: RecordGroup, cursor: RecordCursor) -> TextEntity:
        # 长文本拆成若干 3 组码分段，最后一段在 1 组码
        content = "".join(group.get_all(3)) + (group.get_str(1, "") or "")
        return TextEntity(
            layer=self.read_layer(group),
            position=self.read_point(group),
            height=group.get_float(40),
            content=content,
        )
