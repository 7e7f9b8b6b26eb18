"""
解析流水线阶段定义

阶段顺序：READ_CONTENT → DECODE_TEXT → PARSE_DXF → COMMIT
任一阶段失败即终止，文件状态置为 failed。
"""

from __future__ import annotations

from enum import Enum


class StageEnum(str, Enum):
    """解析流水线阶段枚举"""
    READ_CONTENT = "READ_CONTENT"
    DECODE_TEXT = "DECODE_TEXT"
    PARSE_DXF = "PARSE_DXF"
    COMMIT = "COMMIT"


PARSE_STAGES: list[StageEnum] = [
    StageEnum.READ_CONTENT,
    StageEnum.DECODE_TEXT,
    StageEnum.PARSE_DXF,
    StageEnum.COMMIT,
]
