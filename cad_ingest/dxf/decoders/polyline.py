"""
多段线解码器 - POLYLINE（VERTEX 子对象）与 LWPOLYLINE（内联顶点）

POLYLINE：
- 头部组码：8 图层 / 70 标志（bit 1 闭合）
- 顶点来自后续的 VERTEX 对象（10/20/30），到 SEQEND（一并消费）或其他对象为止
LWPOLYLINE：
- 8 图层 / 70 标志 / 38 标高（作为 z）/ 顶点为连续的 10、20 组码对

没有顶点的多段线整体丢弃。

测试要点：
- test_polyline_vertices: 顶点累积
- test_polyline_without_seqend: 缺少 SEQEND 时在下一个实体处结束
- test_polyline_empty_discarded: 无顶点丢弃
- test_lwpolyline_vertices: 内联顶点
"""

from __future__ import annotations

from ...models import Point, PolylineEntity
from ..tokenizer import RecordCursor, RecordGroup, to_float
from .base import EntityDecoder

CLOSED_FLAG = 1


class PolylineDecoder(EntityDecoder):
    entity_type = "POLYLINE"

    def decode(self, group: RecordGroup, cursor: RecordCursor) -> PolylineEntity | None:
        vertices = self._collect_vertices(cursor)
        if not vertices:
            return None

        return PolylineEntity(
            layer=self.read_layer(group),
            vertices=vertices,
            is_closed=bool(group.get_int(70) & CLOSED_FLAG),
        )

    def _collect_vertices(self, cursor: RecordCursor) -> list[Point]:
        vertices: list[Point] = []
        while True:
            record = cursor.peek()
            if record is None:
                break
            if record.is_marker("VERTEX"):
                cursor.advance()
                vertices.append(self.read_point(cursor.take_group()))
            elif record.is_marker("SEQEND"):
                cursor.advance()
                cursor.take_group()
                break
            else:
                break
        return vertices


class LwPolylineDecoder(EntityDecoder):
    entity_type = "LWPOLYLINE"

    def decode(self, group: RecordGroup, cursor: RecordCursor) -> PolylineEntity | None:
        elevation = group.get_float(38)
        vertices: list[Point] = []
        pending_x: float | None = None

        for record in group:
            if record.code == 10:
                pending_x = to_float(record.value)
            elif record.code == 20 and pending_x is not None:
                vertices.append(Point(x=pending_x, y=to_float(record.value), z=elevation))
                pending_x = None

        if not vertices:
            return None

        return PolylineEntity(
            layer=self.read_layer(group),
            vertices=vertices,
            is_closed=bool(group.get_int(70) & CLOSED_FLAG),
        )
