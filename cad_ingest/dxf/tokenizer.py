"""
分组码切分器 - 文本 → (code, value) 记录序列

DXF 文本格式为"组码行 + 值行"交替出现。宽松解析策略：
- 组码行前后空白去除；组码位置上的空行跳过
- 组码不是整数时只跳过这一行并重新同步，不抛异常
- 末尾只有组码没有值时丢弃
- 数值转换失败取默认值（浮点 0.0 / 整数 0），优先保留部分结果

测试要点：
- test_tokenize_pairs: 正常配对
- test_tokenize_non_numeric_code: 非数字组码重新同步
- test_tokenize_trailing_code: 末尾孤立组码
- test_cursor_take_group: 按 0 组码切分对象
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import NamedTuple

logger = logging.getLogger(__name__)


class Record(NamedTuple):
    """分组码记录"""
    code: int
    value: str

    def is_marker(self, value: str) -> bool:
        """是否为指定的 0 组码结构标记（SECTION/ENDSEC/TABLE/...）"""
        return self.code == 0 and self.value == value


def _parse_code(line: str) -> int | None:
    try:
        return int(line)
    except ValueError:
        return None


def iter_records(text: str) -> Iterator[Record]:
    """惰性切分记录"""
    lines = text.splitlines()
    total = len(lines)
    i = 0
    while i < total:
        line = lines[i].strip()
        if not line:
            i += 1
            continue

        code = _parse_code(line)
        if code is None:
            logger.debug(f"第{i + 1}行组码无效，跳过: {line!r}")
            i += 1
            continue

        if i + 1 >= total:
            logger.debug(f"第{i + 1}行组码缺少值行，已丢弃")
            break

        yield Record(code, lines[i + 1].strip())
        i += 2


def tokenize(text: str) -> list[Record]:
    """切分全部记录"""
    return list(iter_records(text))


def to_float(value: str | None, default: float = 0.0) -> float:
    """宽松浮点转换"""
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def to_int(value: str | None, default: int = 0) -> int:
    """宽松整数转换（兼容 "4.0" 形式）"""
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return int(float(value))
    except (ValueError, OverflowError):
        return default


class RecordGroup:
    """单个对象的分组码集合（0 组码之后、下一个 0 组码之前）"""

    def __init__(self, records: list[Record]):
        self.records = records

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self.records)

    def get_str(self, code: int, default: str | None = None) -> str | None:
        """取第一次出现的值"""
        for record in self.records:
            if record.code == code:
                return record.value
        return default

    def get_float(self, code: int, default: float = 0.0) -> float:
        return to_float(self.get_str(code), default)

    def get_int(self, code: int, default: int = 0) -> int:
        return to_int(self.get_str(code), default)

    def get_all(self, code: int) -> list[str]:
        """取全部出现的值（按出现顺序）"""
        return [r.value for r in self.records if r.code == code]


class RecordCursor:
    """记录游标 - 显式位置推进，避免随文件大小增长的递归深度"""

    def __init__(self, records: list[Record]):
        self.records = records
        self.pos = 0

    @classmethod
    def from_text(cls, text: str) -> RecordCursor:
        return cls(tokenize(text))

    def at_end(self) -> bool:
        return self.pos >= len(self.records)

    def peek(self) -> Record | None:
        if self.at_end():
            return None
        return self.records[self.pos]

    def advance(self) -> Record | None:
        record = self.peek()
        if record is not None:
            self.pos += 1
        return record

    def take_group(self) -> RecordGroup:
        """取出直到下一个 0 组码（不含）的全部记录"""
        start = self.pos
        while not self.at_end() and self.records[self.pos].code != 0:
            self.pos += 1
        return RecordGroup(self.records[start:self.pos])

    def take_value(self, code: int) -> str | None:
        """若下一条记录是指定组码则取出其值，否则不推进"""
        record = self.peek()
        if record is not None and record.code == code:
            self.pos += 1
            return record.value
        return None

    def skip_until(self, marker: str) -> bool:
        """
        跳过直到指定 0 组码标记（标记本身也被消费）

        Returns:
            是否找到标记；未找到时游标停在末尾（截断视为隐式结束）
        """
        while not self.at_end():
            record = self.records[self.pos]
            self.pos += 1
            if record.is_marker(marker):
                return True
        return False
