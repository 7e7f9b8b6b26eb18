"""
DXF 解析模块 - 分组码切分/段状态机/实体解码/图层聚合

子模块：
- tokenizer: 文本 → (code, value) 记录，宽松数值转换，记录游标
- sections: SECTION/TABLE/ENTITIES 状态机
- decoders: 各实体类型解码器
- layers: 图层注册表
- parser: 解析入口
- encoding: 原始字节解码
"""

from .encoding import ContentDecoder
from .layers import LayerRegistry
from .parser import DxfParser, parse_dxf
from .sections import SectionState, SectionStateMachine, display_type_name
from .tokenizer import Record, RecordCursor, RecordGroup, tokenize, to_float, to_int

__all__ = [
    "Record",
    "RecordCursor",
    "RecordGroup",
    "tokenize",
    "to_float",
    "to_int",
    "SectionState",
    "SectionStateMachine",
    "display_type_name",
    "LayerRegistry",
    "DxfParser",
    "parse_dxf",
    "ContentDecoder",
]
