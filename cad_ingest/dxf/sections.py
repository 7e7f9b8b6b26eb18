"""
段状态机 - 识别 SECTION / TABLE / ENTITIES 结构并分派

状态：ROOT → {TABLES → LAYER_TABLE, ENTITIES}；其余段（HEADER/BLOCKS/OBJECTS…）整段跳过
实现：显式状态栈 + 记录游标迭代推进，每一步至少消费一条记录，递归深度与文件大小无关

容错：
- 段/表未闭合（文件截断）时，输入结束即视为隐式闭合
- 未支持的实体类型记录名称后跳过，不中断后续解析
- 游离的 VERTEX/SEQEND 直接跳过

测试要点：
- test_skip_unknown_section: 非 TABLES/ENTITIES 段被跳过
- test_layer_table: 图层表解析（锁定位/颜色/线型）
- test_truncated_section: 截断输入
- test_unsupported_entity: 未支持实体记录并跳过
"""

from __future__ import annotations

import logging
from enum import Enum

from ..interfaces import IEntityDecoder
from ..models import DEFAULT_LAYER, LayerInfo, ParsedEntity
from .decoders import default_decoders
from .layers import LayerRegistry
from .tokenizer import Record, RecordCursor, RecordGroup

logger = logging.getLogger(__name__)

# 图层标志位（组码 70）：bit 4 = 锁定
LAYER_LOCKED_FLAG = 4

# 多段线/块属性的子对象，脱离父实体出现时静默跳过
_ORPHAN_SUBENTITIES = frozenset({"VERTEX", "SEQEND"})

# 类型名到展示名的特例（其余按下划线分词首字母大写）
_DISPLAY_NAMES = {
    "3DFACE": "Face3D",
    "3DSOLID": "Solid3D",
    "ATTRIB": "Attribute",
    "ATTDEF": "AttributeDefinition",
    "MLINE": "MLine",
    "XLINE": "XLine",
    "MLEADER": "MLeader",
    "MULTILEADER": "MLeader",
}


class SectionState(str, Enum):
    """状态机状态"""
    ROOT = "ROOT"
    TABLES = "TABLES"
    LAYER_TABLE = "LAYER_TABLE"
    ENTITIES = "ENTITIES"


def display_type_name(entity_type: str) -> str:
    """实体类型展示名：ELLIPSE → Ellipse，ACAD_TABLE → AcadTable"""
    if entity_type in _DISPLAY_NAMES:
        return _DISPLAY_NAMES[entity_type]
    parts = [p for p in entity_type.split("_") if p]
    return "".join(p.capitalize() for p in parts) or "Unknown"


def read_layer_info(group: RecordGroup) -> LayerInfo:
    """LAYER 表记录 → 图层属性"""
    flags = group.get_int(70)
    color_raw = group.get_str(62)
    color: str | None = None
    is_visible = True
    if color_raw is not None:
        # 负颜色号表示图层关闭
        color_value = group.get_int(62)
        is_visible = color_value >= 0
        color = str(abs(color_value))

    return LayerInfo(
        name=group.get_str(2) or DEFAULT_LAYER,
        is_locked=bool(flags & LAYER_LOCKED_FLAG),
        is_visible=is_visible,
        color=color,
        line_type=group.get_str(6),
        line_weight=group.get_str(370),
    )


class SectionStateMachine:
    """DXF 段结构状态机（每次解析一个实例）"""

    def __init__(
        self,
        decoders: dict[str, IEntityDecoder] | None = None,
        registry: LayerRegistry | None = None,
    ):
        self.decoders = decoders if decoders is not None else default_decoders()
        self.registry = registry if registry is not None else LayerRegistry()
        self.entities: list[ParsedEntity] = []
        self.unsupported: dict[str, None] = {}  # 保序去重
        self._stack: list[SectionState] = [SectionState.ROOT]

    @property
    def state(self) -> SectionState:
        return self._stack[-1]

    @property
    def unsupported_entity_types(self) -> list[str]:
        return list(self.unsupported)

    def run(self, cursor: RecordCursor) -> None:
        """推进到输入结束"""
        while not cursor.at_end():
            record = cursor.advance()
            if record is None:
                break
            if record.is_marker("EOF"):
                break

            state = self.state
            if state is SectionState.ROOT:
                self._step_root(record, cursor)
            elif state is SectionState.TABLES:
                self._step_tables(record, cursor)
            elif state is SectionState.LAYER_TABLE:
                self._step_layer_table(record, cursor)
            elif state is SectionState.ENTITIES:
                self._step_entities(record, cursor)

        if len(self._stack) > 1:
            logger.debug(f"输入提前结束，隐式闭合: {[s.value for s in self._stack[1:]]}")
        self._stack = [SectionState.ROOT]

    # ------------------------------------------------------------------
    # 各状态的单步处理
    # ------------------------------------------------------------------

    def _step_root(self, record: Record, cursor: RecordCursor) -> None:
        if not record.is_marker("SECTION"):
            return

        name = cursor.take_value(2)
        if name is None:
            return
        if name == "TABLES":
            self._stack.append(SectionState.TABLES)
        elif name == "ENTITIES":
            self._stack.append(SectionState.ENTITIES)
        else:
            logger.debug(f"跳过段: {name}")
            cursor.skip_until("ENDSEC")

    def _step_tables(self, record: Record, cursor: RecordCursor) -> None:
        if record.is_marker("ENDSEC"):
            self._stack.pop()
        elif record.is_marker("TABLE"):
            name = cursor.take_value(2)
            if name == "LAYER":
                self._stack.append(SectionState.LAYER_TABLE)
            else:
                cursor.skip_until("ENDTAB")

    def _step_layer_table(self, record: Record, cursor: RecordCursor) -> None:
        if record.is_marker("ENDTAB"):
            self._stack.pop()
        elif record.is_marker("ENDSEC"):
            # 表未闭合就遇到段结束
            self._stack.pop()
            self._stack.pop()
        elif record.is_marker("LAYER"):
            self.registry.declare(read_layer_info(cursor.take_group()))

    def _step_entities(self, record: Record, cursor: RecordCursor) -> None:
        if record.code != 0:
            return
        if record.value == "ENDSEC":
            self._stack.pop()
            return

        decoder = self.decoders.get(record.value)
        group = cursor.take_group()

        if decoder is not None:
            entity = decoder.decode(group, cursor)
            if entity is not None:
                self.entities.append(entity)
                self.registry.add(entity)
        elif record.value not in _ORPHAN_SUBENTITIES:
            self._report_unsupported(record.value)

    def _report_unsupported(self, entity_type: str) -> None:
        name = display_type_name(entity_type)
        if name not in self.unsupported:
            logger.warning(f"不支持的实体类型: {name}")
            self.unsupported[name] = None
