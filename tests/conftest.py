"""
pytest 配置与公共 fixtures

使用方式：
    def test_something(dxf_text, parser):
        drawing = parser.parse(dxf_text(entities=LINE))
"""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Callable, Generator

import pytest

from cad_ingest.config import RuntimeConfig, runtime_config as runtime_config_module
from cad_ingest.dxf import DxfParser
from cad_ingest.storage import InMemoryContentProvider, MemoryParseStore


# ============================================================================
# DXF 文本构造
# ============================================================================

def _lines(*pairs: tuple[int, object]) -> str:
    return "".join(f"{code}\n{value}\n" for code, value in pairs)


def make_layer_record(
    name: str,
    flags: int = 0,
    color: int = 7,
    line_type: str = "CONTINUOUS",
) -> str:
    """LAYER 表记录"""
    return _lines((0, "LAYER"), (2, name), (70, flags), (62, color), (6, line_type))


def make_dxf(
    entities: str = "",
    layers: str = "",
    header: bool = True,
    eof: bool = True,
) -> str:
    """拼装最小 DXF 文本（HEADER/TABLES/ENTITIES）"""
    parts: list[str] = []
    if header:
        parts.append(_lines(
            (0, "SECTION"), (2, "HEADER"),
            (9, "$ACADVER"), (1, "AC1009"),
            (0, "ENDSEC"),
        ))
    if layers:
        parts.append(_lines((0, "SECTION"), (2, "TABLES"), (0, "TABLE"), (2, "LAYER"), (70, 1)))
        parts.append(layers)
        parts.append(_lines((0, "ENDTAB"), (0, "ENDSEC")))
    parts.append(_lines((0, "SECTION"), (2, "ENTITIES")))
    parts.append(entities)
    parts.append(_lines((0, "ENDSEC")))
    if eof:
        parts.append(_lines((0, "EOF")))
    return "".join(parts)


LINE_LAYER1 = _lines(
    (0, "LINE"), (8, "LAYER1"),
    (10, 0.0), (20, 0.0), (30, 0.0),
    (11, 10.0), (21, 5.0), (31, 0.0),
)

ELLIPSE_LAYER1 = _lines(
    (0, "ELLIPSE"), (8, "LAYER1"),
    (10, 0.0), (20, 0.0), (30, 0.0),
    (11, 5.0), (21, 0.0), (31, 0.0),
    (40, 0.5),
)


@pytest.fixture
def dxf_text() -> Callable[..., str]:
    """DXF 文本构造器"""
    return make_dxf


@pytest.fixture
def line_ellipse_dxf() -> str:
    """一条 LINE + 一个 ELLIPSE（均在 LAYER1）"""
    return make_dxf(entities=LINE_LAYER1 + ELLIPSE_LAYER1)


@pytest.fixture
def sample_dxf() -> str:
    """包含图层表与多种实体的示例"""
    layers = (
        make_layer_record("0")
        + make_layer_record("WALL", flags=4, color=1, line_type="DASHED")
        + make_layer_record("HIDDEN", color=-3)
    )
    entities = (
        LINE_LAYER1
        + _lines((0, "CIRCLE"), (8, "WALL"), (10, 5.0), (20, 5.0), (30, 0.0), (40, 2.0))
        + _lines((0, "ARC"), (8, "WALL"), (10, 0.0), (20, 0.0), (40, 1.0), (50, 0.0), (51, 180.0))
        + _lines((0, "TEXT"), (8, "0"), (10, 1.0), (20, 1.0), (40, 5.0), (1, "HELLO WORLD"))
        + _lines((0, "INSERT"), (8, "HIDDEN"), (2, "DOOR"), (10, 3.0), (20, 4.0), (41, 2.0))
        + ELLIPSE_LAYER1
    )
    return make_dxf(entities=entities, layers=layers)


# ============================================================================
# 配置 Fixtures
# ============================================================================

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """临时目录"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def runtime_config(temp_dir: Path) -> RuntimeConfig:
    """运行期配置（存储目录指向临时目录）"""
    return RuntimeConfig(storage_dir=temp_dir / "storage")


@pytest.fixture(autouse=True)
def isolated_config(
    runtime_config: RuntimeConfig, monkeypatch: pytest.MonkeyPatch
) -> RuntimeConfig:
    """全局配置替换为临时配置，避免依赖工作目录下的 config/runtime.yaml"""
    monkeypatch.setattr(runtime_config_module, "_config", runtime_config)
    return runtime_config


# ============================================================================
# 解析/存储 Fixtures
# ============================================================================

@pytest.fixture
def parser() -> DxfParser:
    return DxfParser()


@pytest.fixture
def store() -> MemoryParseStore:
    """内存持久化网关"""
    return MemoryParseStore()


@pytest.fixture
def provider() -> InMemoryContentProvider:
    """内存内容提供者"""
    return InMemoryContentProvider()
