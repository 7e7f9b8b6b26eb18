"""
流水线模块 - 解析任务编排与执行

子模块：
- stages: 流水线各阶段定义
- executor: 单文件解析流水线（读取/解码/解析/提交）
- orchestrator: 单飞获取与后台调度
"""

from .executor import ParsePipeline
from .orchestrator import ParseOrchestrator, ParseRequestResult
from .stages import PARSE_STAGES, StageEnum

__all__ = [
    "StageEnum",
    "PARSE_STAGES",
    "ParsePipeline",
    "ParseOrchestrator",
    "ParseRequestResult",
]
