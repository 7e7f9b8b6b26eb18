"""
存储模块 - 文件状态与解析结果持久化、原始内容读取

子模块：
- memory: 内存持久化网关（单进程）
- sql: SQLAlchemy 持久化网关（关系型数据库）
- content: 原始内容提供者（本地文件/内存）
"""

from .content import InMemoryContentProvider, LocalContentProvider
from .memory import MemoryParseStore
from .sql import SqlParseStore

__all__ = [
    "MemoryParseStore",
    "SqlParseStore",
    "LocalContentProvider",
    "InMemoryContentProvider",
]
