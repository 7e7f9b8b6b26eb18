"""
DXF 解析器 - 文本 → ParsedDrawing

流程：
1. 分组码切分（tokenizer）
2. 段状态机分派（sections）→ 实体解码（decoders）
3. 图层聚合（layers）→ 汇总 ParseResult

解析过程单线程、无副作用；每次调用使用独立的图层注册表。
对结构可导航的畸形输入不抛异常，尽量返回部分结果。

使用方式：
    drawing = DxfParser().parse(text)
    drawing.result.entities
    drawing.layers
"""

from __future__ import annotations

import logging

from ..interfaces import IEntityDecoder
from ..models import ParsedDrawing, ParseResult
from .decoders import default_decoders
from .layers import LayerRegistry
from .sections import SectionStateMachine
from .tokenizer import RecordCursor

logger = logging.getLogger(__name__)


class DxfParser:
    """DXF 文本解析器"""

    def __init__(self, decoders: dict[str, IEntityDecoder] | None = None):
        self.decoders = decoders if decoders is not None else default_decoders()

    def parse(self, text: str) -> ParsedDrawing:
        """解析 DXF 文本"""
        cursor = RecordCursor.from_text(text)
        machine = SectionStateMachine(decoders=self.decoders, registry=LayerRegistry())
        machine.run(cursor)

        result = ParseResult.build(machine.entities, machine.unsupported_entity_types)
        layers = machine.registry.layers()
        logger.debug(
            f"解析完成: 记录{len(cursor.records)}条, 实体{len(result.entities)}个, "
            f"图层{len(layers)}个, 不支持类型{result.unsupported_entity_types}"
        )
        return ParsedDrawing(result=result, layers=layers)


def parse_dxf(text: str) -> ParsedDrawing:
    """便捷函数：使用默认解码器解析"""
    return DxfParser().parse(text)
