"""
原始内容读取 - 按文件标识取回上传的 DXF 字节

存储约定：<storage_dir>/files/<file_id>/original.dxf
（缺失时回退为目录下第一个 *.dxf 文件）
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..config import RuntimeConfig, get_config
from ..interfaces import ContentReadError, IContentProvider

logger = logging.getLogger(__name__)

ORIGINAL_FILENAME = "original.dxf"


class LocalContentProvider(IContentProvider):
    """本地文件系统内容提供者"""

    def __init__(self, config: RuntimeConfig | None = None):
        self.config = config or get_config()

    def locate(self, file_id: str) -> Path:
        """定位原始文件路径"""
        file_dir = self.config.get_file_dir(file_id)
        original = file_dir / ORIGINAL_FILENAME
        if original.exists():
            return original

        candidates = sorted(file_dir.glob("*.dxf")) if file_dir.is_dir() else []
        if not candidates:
            raise ContentReadError(f"未找到原始文件: {file_dir}")
        return candidates[0]

    def save(self, file_id: str, content: bytes) -> Path:
        """写入原始文件（上传入口使用）"""
        file_dir = self.config.get_file_dir(file_id)
        file_dir.mkdir(parents=True, exist_ok=True)
        path = file_dir / ORIGINAL_FILENAME
        path.write_bytes(content)
        return path

    def read(self, file_id: str) -> bytes:
        path = self.locate(file_id)
        try:
            content = path.read_bytes()
        except OSError as e:
            raise ContentReadError(f"读取原始文件失败: {path}: {e}") from e
        logger.debug(f"[{file_id}] 读取原始文件 {path.name} ({len(content)} 字节)")
        return content


class InMemoryContentProvider(IContentProvider):
    """内存内容提供者（测试与嵌入式调用）"""

    def __init__(self, contents: dict[str, bytes] | None = None):
        self._contents: dict[str, bytes] = dict(contents or {})

    def put(self, file_id: str, content: bytes | str) -> None:
        if isinstance(content, str):
            content = content.encode("utf-8")
        self._contents[file_id] = content

    def read(self, file_id: str) -> bytes:
        try:
            return self._contents[file_id]
        except KeyError:
            raise ContentReadError(f"未找到原始内容: {file_id}") from None
