"""
与 ezdxf 生成的图纸对照测试

用 ezdxf 独立生成 DXF 文件，再用本项目解析器读取，核对实体/图层/边界框。
"""

from pathlib import Path

import ezdxf
import pytest

from cad_ingest.dxf import ContentDecoder, DxfParser
from cad_ingest.models import InsertEntity, PolylineEntity, TextEntity

SUPPORTED_QUERY = "LINE CIRCLE ARC TEXT MTEXT INSERT LWPOLYLINE POLYLINE"


@pytest.fixture
def ezdxf_drawing(temp_dir: Path) -> Path:
    """ezdxf 生成的 R2010 图纸"""
    doc = ezdxf.new("R2010", setup=True)
    wall = doc.layers.add("WALL", color=1, linetype="DASHED")
    wall.lock()
    hidden = doc.layers.add("HIDDEN", color=3)
    hidden.off()

    block = doc.blocks.new("DOOR")
    block.add_line((0, 0), (100, 100))
    block.add_attdef("TAG", (0, 0))

    msp = doc.modelspace()
    msp.add_line((0, 0), (10, 5), dxfattribs={"layer": "WALL"})
    msp.add_circle((5, 5), 2, dxfattribs={"layer": "WALL"})
    msp.add_arc((0, 0), 1, 0, 180, dxfattribs={"layer": "ARCS"})
    msp.add_text("0123456789", height=5, dxfattribs={"insert": (20, 0), "layer": "NOTE"})
    msp.add_lwpolyline([(0, 0), (4, 0), (4, 3)], close=True, dxfattribs={"layer": "PL"})
    msp.add_polyline2d([(-5, -5), (-1, -5), (-1, -2)], close=True, dxfattribs={"layer": "PL"})
    ref = msp.add_blockref("DOOR", (3, 4), dxfattribs={"layer": "HIDDEN", "xscale": 2})
    ref.add_attrib("TAG", "D1", (3, 4))
    msp.add_ellipse((0, 0), major_axis=(5, 0), ratio=0.5)
    msp.add_spline([(0, 0), (1, 2), (3, 1), (4, 4)])

    path = temp_dir / "ezdxf_sample.dxf"
    doc.saveas(path)
    return path


@pytest.fixture
def parsed(ezdxf_drawing: Path):
    text = ContentDecoder().decode(ezdxf_drawing.read_bytes())
    return DxfParser().parse(text)


class TestEzdxfDocument:
    """ezdxf 图纸解析测试"""

    def test_entity_count_matches_ezdxf(self, ezdxf_drawing: Path, parsed):
        """测试支持的实体数量与 ezdxf 读取结果一致"""
        msp = ezdxf.readfile(str(ezdxf_drawing)).modelspace()
        assert len(parsed.result.entities) == len(msp.query(SUPPORTED_QUERY))

    def test_entity_order(self, parsed):
        """测试实体保持文档顺序（块内容与属性不单独出现）"""
        types = [e.type for e in parsed.result.entities]
        assert types == ["LINE", "CIRCLE", "ARC", "TEXT", "POLYLINE", "POLYLINE", "INSERT"]

    def test_unsupported_types(self, parsed):
        """测试椭圆与样条记录为不支持"""
        assert parsed.result.unsupported_entity_types == ["Ellipse", "Spline"]

    def test_layer_table(self, parsed):
        """测试图层表属性"""
        wall = parsed.get_layer("WALL").info
        assert wall.is_locked
        assert wall.color == "1"
        assert wall.line_type == "DASHED"

        hidden = parsed.get_layer("HIDDEN").info
        assert not hidden.is_visible
        assert hidden.color == "3"

        assert parsed.get_layer("0") is not None

    def test_layers_of_entities(self, parsed):
        """测试实体引用的图层（字母序）"""
        assert parsed.result.layers == ["ARCS", "HIDDEN", "NOTE", "PL", "WALL"]

    def test_polylines(self, parsed):
        """测试两种多段线顶点与闭合标志"""
        polylines = [e for e in parsed.result.entities if isinstance(e, PolylineEntity)]
        assert [len(p.vertices) for p in polylines] == [3, 3]
        assert all(p.is_closed for p in polylines)
        box = parsed.get_layer("PL").bounding_box
        assert (box.min.x, box.min.y) == pytest.approx((-5, -5))
        assert (box.max.x, box.max.y) == pytest.approx((4, 3))

    def test_text_and_insert(self, parsed):
        """测试文字宽度估算与块参照"""
        text = next(e for e in parsed.result.entities if isinstance(e, TextEntity))
        assert text.bounding_box().width == pytest.approx(30)

        insert = next(e for e in parsed.result.entities if isinstance(e, InsertEntity))
        assert insert.block_name == "DOOR"
        assert insert.scale_x == pytest.approx(2)
        assert insert.bounding_box().min.x == pytest.approx(3)

    def test_arc_bbox(self, parsed):
        """测试半圆边界框"""
        box = parsed.get_layer("ARCS").bounding_box
        assert (box.min.x, box.min.y) == pytest.approx((-1, 0), abs=1e-9)
        assert (box.max.x, box.max.y) == pytest.approx((1, 1))

    def test_block_content_not_expanded(self, parsed):
        """测试块定义内的实体不计入结果"""
        assert parsed.result.bounding_box.max.x < 100
