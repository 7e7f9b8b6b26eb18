"""
数据模型单元测试

每个模块完成后必须运行：pytest tests/unit/test_models.py -v
"""

from datetime import datetime, timedelta

import pytest
from pydantic import TypeAdapter

from cad_ingest.models import (
    ArcEntity,
    FileRecord,
    InsertEntity,
    LineEntity,
    ParsedEntity,
    ParseResult,
    ParseStatus,
    Point,
    TextEntity,
    to_stored_rows,
)


class TestEntities:
    """实体模型测试"""

    def test_text_bbox_width(self):
        """测试文字宽度估算 10 * 5 * 0.6 = 30"""
        text = TextEntity(content="x" * 10, height=5)
        assert text.estimated_width == pytest.approx(30)
        assert text.bounding_box().width == pytest.approx(30)

    def test_payload_excludes_layer(self):
        """测试持久化数据不含类型和图层"""
        payload = InsertEntity(layer="A", block_name="B", position=Point(x=1)).to_payload()
        assert "layer" not in payload
        assert "type" not in payload
        assert payload["block_name"] == "B"
        assert payload["position"] == {"x": 1.0, "y": 0.0, "z": 0.0}

    def test_discriminated_union(self):
        """测试按 type 标签还原实体"""
        adapter = TypeAdapter(ParsedEntity)
        entity = adapter.validate_python({"type": "ARC", "radius": 2, "layer": "L"})
        assert isinstance(entity, ArcEntity)
        assert entity.end_angle == 360


class TestParseResult:
    """解析结果测试"""

    def test_build(self):
        """测试图层名去重排序与总边界框"""
        entities = [
            LineEntity(layer="B", end=Point(x=2, y=2)),
            LineEntity(layer="A", start=Point(x=-1, y=0)),
            LineEntity(layer="B"),
        ]
        result = ParseResult.build(entities, ["Ellipse"])
        assert result.layers == ["A", "B"]
        assert result.bounding_box.min == Point(x=-1, y=0)
        assert result.bounding_box.max == Point(x=2, y=2)
        assert result.unsupported_entity_types == ["Ellipse"]

    def test_build_empty(self):
        """测试空结果"""
        result = ParseResult.build([])
        assert result.layers == []
        assert result.bounding_box is None


class TestStoredRows:
    """持久化行展开测试"""

    def test_to_stored_rows(self, parser, sample_dxf):
        """测试图层行与实体行"""
        drawing = parser.parse(sample_dxf)
        layers, entities = to_stored_rows("f1", drawing)

        assert [l.name for l in layers] == ["0", "HIDDEN", "LAYER1", "WALL"]
        assert all(l.file_id == "f1" for l in layers)
        wall = next(l for l in layers if l.name == "WALL")
        assert wall.is_locked and wall.line_type == "DASHED"

        assert [e.seq for e in entities] == [0, 1, 2, 3, 4]
        assert [e.entity_type for e in entities] == ["LINE", "CIRCLE", "ARC", "TEXT", "INSERT"]
        assert entities[0].layer == "LAYER1"
        assert entities[0].data["end"] == {"x": 10.0, "y": 5.0, "z": 0.0}


class TestFileRecord:
    """文件状态记录测试"""

    def test_lifecycle(self):
        """测试 uploaded → parsing → failed → parsing → parsed"""
        record = FileRecord(file_id="f1")
        assert record.status == ParseStatus.UPLOADED

        record.mark_parsing()
        assert record.status == ParseStatus.PARSING
        assert record.parse_started_at is not None

        record.mark_failed("boom")
        assert record.status == ParseStatus.FAILED
        assert record.parse_error == "boom"

        record.mark_parsing()
        record.mark_parsed()
        assert record.status == ParseStatus.PARSED
        assert record.parse_error is None
        assert record.parsed_at is not None

    def test_is_stale(self):
        """测试解析中超时判定"""
        record = FileRecord(file_id="f1")
        assert not record.is_stale(10)

        record.mark_parsing()
        assert not record.is_stale(10)
        assert not record.is_stale(None)

        record.parse_started_at = datetime.now() - timedelta(seconds=60)
        assert record.is_stale(10)
