"""
内容解码器 - 原始字节 → 文本

按候选编码依次尝试严格解码（默认 utf-8-sig → gb18030），全部失败时以 latin-1 兜底
（latin-1 可解码任意字节，保证 DXF 结构仍可导航）。
"""

from __future__ import annotations

import logging

from ..config import get_config
from ..interfaces import DecodeError, IContentDecoder

logger = logging.getLogger(__name__)

FALLBACK_ENCODING = "latin-1"


class ContentDecoder(IContentDecoder):
    """候选编码顺序解码"""

    def __init__(self, candidates: list[str] | None = None):
        self.candidates = candidates or list(get_config().encoding.candidates)

    def decode(self, data: bytes) -> str:
        """字节解码为文本"""
        for encoding in self.candidates:
            try:
                return data.decode(encoding)
            except UnicodeDecodeError:
                continue
            except LookupError as e:
                raise DecodeError(f"未知编码: {encoding}") from e

        logger.warning(f"候选编码均解码失败 {self.candidates}，使用 {FALLBACK_ENCODING}")
        return data.decode(FALLBACK_ENCODING)
