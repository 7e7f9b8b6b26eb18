"""
实体解码器子模块 - 每种实体类型一个解码器

子模块：
- line: LINE
- polyline: POLYLINE / LWPOLYLINE
- arc: ARC
- circle: CIRCLE
- text: TEXT / MTEXT
- insert: INSERT（块参照）
"""

from __future__ import annotations

from .arc import ArcDecoder
from .base import EntityDecoder
from .circle import CircleDecoder
from .insert import InsertDecoder
from .line import LineDecoder
from .polyline import LwPolylineDecoder, PolylineDecoder
from .text import MTextDecoder, TextDecoder


def default_decoders() -> dict[str, EntityDecoder]:
    """实体类型名 → 解码器"""
    decoders: list[EntityDecoder] = [
        LineDecoder(),
        PolylineDecoder(),
        LwPolylineDecoder(),
        ArcDecoder(),
        CircleDecoder(),
        TextDecoder(),
        MTextDecoder(),
        InsertDecoder(),
    ]
    return {d.entity_type: d for d in decoders}


__all__ = [
    "EntityDecoder",
    "LineDecoder",
    "PolylineDecoder",
    "LwPolylineDecoder",
    "ArcDecoder",
    "CircleDecoder",
    "TextDecoder",
    "MTextDecoder",
    "InsertDecoder",
    "default_decoders",
]
