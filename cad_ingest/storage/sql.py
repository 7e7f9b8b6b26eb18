"""
关系型持久化网关 - SQLAlchemy Core 实现

表结构：
- files:    文件解析状态（status / parse_error / parse_started_at ...）
- layers:   图层行（属性 + 聚合边界框），(file_id, name) 唯一
- entities: 实体行（类型标签 + JSON 数据 + 边界框），归属图层

单飞获取：UPDATE files SET status='parsing' WHERE id=? AND status!='parsing'
         （或 parsing 已超时），按影响行数判断是否获取成功，跨进程有效。
结果提交：删除旧图层/实体 → 写入新行 → 状态置 parsed，同一事务内完成；
         任一步骤失败整体回滚。

测试要点：
- test_try_mark_parsing_cas: 条件更新单飞
- test_replace_results_overwrites: 重新解析整体覆盖
- test_replace_results_rollback: 失败回滚保留旧结果
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    create_engine,
    delete,
    insert,
    or_,
    select,
    update,
)
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from ..config import get_config
from ..interfaces import IParseStore, PersistenceError, UnknownFileError
from ..models import BoundingBox, FileRecord, ParseStatus, Point, StoredEntity, StoredLayer

logger = logging.getLogger(__name__)

metadata = MetaData()

_BBOX_FIELDS = ("min_x", "min_y", "min_z", "max_x", "max_y", "max_z")


def _bbox_columns() -> list[Column]:
    return [Column(name, Float, nullable=True) for name in _BBOX_FIELDS]

files_table = Table(
    "files",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("name", String(255), nullable=False, default=""),
    Column("status", String(16), nullable=False, default=ParseStatus.UPLOADED.value),
    Column("parse_error", Text, nullable=True),
    Column("created_at", DateTime, nullable=False),
    Column("updated_at", DateTime, nullable=False),
    Column("parse_started_at", DateTime, nullable=True),
    Column("parsed_at", DateTime, nullable=True),
)

layers_table = Table(
    "layers",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("file_id", String(64), ForeignKey("files.id", ondelete="CASCADE"), nullable=False),
    Column("name", String(255), nullable=False),
    Column("is_locked", Boolean, nullable=False, default=False),
    Column("is_visible", Boolean, nullable=False, default=True),
    Column("color", String(32), nullable=True),
    Column("line_type", String(255), nullable=True),
    Column("line_weight", String(32), nullable=True),
    *_bbox_columns(),
    UniqueConstraint("file_id", "name", name="uq_layers_file_name"),
)

entities_table = Table(
    "entities",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("file_id", String(64), ForeignKey("files.id", ondelete="CASCADE"), nullable=False),
    Column("layer_id", Integer, ForeignKey("layers.id", ondelete="CASCADE"), nullable=False),
    Column("seq", Integer, nullable=False),
    Column("entity_type", String(32), nullable=False),
    Column("data", JSON, nullable=False),
    *_bbox_columns(),
)


def _bbox_values(box: BoundingBox | None) -> dict[str, float | None]:
    if box is None:
        return {name: None for name in _BBOX_FIELDS}
    return {
        "min_x": box.min.x,
        "min_y": box.min.y,
        "min_z": box.min.z,
        "max_x": box.max.x,
        "max_y": box.max.y,
        "max_z": box.max.z,
    }


def _bbox_from_row(row: Any) -> BoundingBox | None:
    if row.min_x is None:
        return None
    return BoundingBox(
        min=Point(x=row.min_x, y=row.min_y, z=row.min_z or 0.0),
        max=Point(x=row.max_x, y=row.max_y, z=row.max_z or 0.0),
    )


class SqlParseStore(IParseStore):
    """SQLAlchemy 持久化网关"""

    def __init__(self, engine: Engine, create_schema: bool = True):
        self.engine = engine
        if create_schema:
            metadata.create_all(self.engine)

    @classmethod
    def from_url(cls, url: str | None = None, echo: bool | None = None) -> SqlParseStore:
        """按连接串创建（缺省取运行期配置）"""
        config = get_config()
        url = url or config.database.url
        echo = config.database.echo if echo is None else echo

        kwargs: dict[str, Any] = {"echo": echo}
        if url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in url or url in ("sqlite://", "sqlite+pysqlite://"):
                kwargs["poolclass"] = StaticPool
        return cls(create_engine(url, **kwargs))

    # ------------------------------------------------------------------
    # 文件状态
    # ------------------------------------------------------------------

    def register_file(self, file_id: str, name: str = "") -> FileRecord:
        record = FileRecord(file_id=file_id, name=name)
        with self.engine.begin() as conn:
            conn.execute(delete(entities_table).where(entities_table.c.file_id == file_id))
            conn.execute(delete(layers_table).where(layers_table.c.file_id == file_id))
            conn.execute(delete(files_table).where(files_table.c.id == file_id))
            conn.execute(
                insert(files_table).values(
                    id=record.file_id,
                    name=record.name,
                    status=record.status.value,
                    created_at=record.created_at,
                    updated_at=record.updated_at,
                )
            )
        return record

    def get_file(self, file_id: str) -> FileRecord | None:
        with self.engine.connect() as conn:
            row = conn.execute(
                select(files_table).where(files_table.c.id == file_id)
            ).first()
        if row is None:
            return None
        return FileRecord(
            file_id=row.id,
            name=row.name,
            status=ParseStatus(row.status),
            parse_error=row.parse_error,
            created_at=row.created_at,
            updated_at=row.updated_at,
            parse_started_at=row.parse_started_at,
            parsed_at=row.parsed_at,
        )

    def try_mark_parsing(self, file_id: str, stale_after_sec: float | None = None) -> bool:
        now = datetime.now()
        condition = files_table.c.status != ParseStatus.PARSING.value
        if stale_after_sec is not None:
            cutoff = now - timedelta(seconds=stale_after_sec)
            condition = or_(
                condition,
                files_table.c.parse_started_at.is_(None),
                files_table.c.parse_started_at < cutoff,
            )

        with self.engine.begin() as conn:
            result = conn.execute(
                update(files_table)
                .where(files_table.c.id == file_id, condition)
                .values(status=ParseStatus.PARSING.value, parse_started_at=now, updated_at=now)
            )
            if result.rowcount > 0:
                return True
            self._require(conn, file_id)
            return False

    def set_status(self, file_id: str, status: ParseStatus, error: str | None = None) -> None:
        now = datetime.now()
        values: dict[str, Any] = {"status": status.value, "updated_at": now}
        if status == ParseStatus.FAILED:
            values["parse_error"] = error or ""
        elif status == ParseStatus.PARSED:
            values["parse_error"] = None
            values["parsed_at"] = now
        elif status == ParseStatus.PARSING:
            values["parse_started_at"] = now
        else:
            values["parse_error"] = error

        with self.engine.begin() as conn:
            result = conn.execute(
                update(files_table).where(files_table.c.id == file_id).values(**values)
            )
            if result.rowcount == 0:
                raise UnknownFileError(f"文件不存在: {file_id}")

    def reset_status(self, file_id: str) -> None:
        with self.engine.begin() as conn:
            result = conn.execute(
                update(files_table)
                .where(files_table.c.id == file_id)
                .values(
                    status=ParseStatus.UPLOADED.value,
                    parse_started_at=None,
                    updated_at=datetime.now(),
                )
            )
            if result.rowcount == 0:
                raise UnknownFileError(f"文件不存在: {file_id}")

    # ------------------------------------------------------------------
    # 解析结果
    # ------------------------------------------------------------------

    def replace_parse_results(
        self,
        file_id: str,
        layers: list[StoredLayer],
        entities: list[StoredEntity],
    ) -> None:
        try:
            with self.engine.begin() as conn:
                self._require(conn, file_id)

                conn.execute(delete(entities_table).where(entities_table.c.file_id == file_id))
                conn.execute(delete(layers_table).where(layers_table.c.file_id == file_id))

                layer_ids = self._insert_layers(conn, file_id, layers)
                self._insert_entities(conn, file_id, entities, layer_ids)

                now = datetime.now()
                conn.execute(
                    update(files_table)
                    .where(files_table.c.id == file_id)
                    .values(
                        status=ParseStatus.PARSED.value,
                        parse_error=None,
                        parsed_at=now,
                        updated_at=now,
                    )
                )
        except SQLAlchemyError as e:
            raise PersistenceError(f"解析结果写入失败: {e}") from e

        logger.info(f"[{file_id}] 解析结果已提交: 图层{len(layers)}个, 实体{len(entities)}个")

    def _insert_layers(
        self, conn: Connection, file_id: str, layers: list[StoredLayer]
    ) -> dict[str, int]:
        layer_ids: dict[str, int] = {}
        for layer in layers:
            result = conn.execute(
                insert(layers_table).values(
                    file_id=file_id,
                    name=layer.name,
                    is_locked=layer.is_locked,
                    is_visible=layer.is_visible,
                    color=layer.color,
                    line_type=layer.line_type,
                    line_weight=layer.line_weight,
                    **_bbox_values(layer.bounding_box),
                )
            )
            layer_ids[layer.name] = result.inserted_primary_key[0]
        return layer_ids

    def _insert_entities(
        self,
        conn: Connection,
        file_id: str,
        entities: list[StoredEntity],
        layer_ids: dict[str, int],
    ) -> None:
        if not entities:
            return

        rows = []
        for entity in entities:
            layer_id = layer_ids.get(entity.layer)
            if layer_id is None:
                raise PersistenceError(f"实体引用了未写入的图层: {entity.layer}")
            rows.append(
                {
                    "file_id": file_id,
                    "layer_id": layer_id,
                    "seq": entity.seq,
                    "entity_type": entity.entity_type,
                    "data": entity.data,
                    **_bbox_values(entity.bounding_box),
                }
            )
        conn.execute(insert(entities_table), rows)

    def get_layers(self, file_id: str) -> list[StoredLayer]:
        with self.engine.connect() as conn:
            rows = conn.execute(
                select(layers_table)
                .where(layers_table.c.file_id == file_id)
                .order_by(layers_table.c.name)
            ).all()
        return [
            StoredLayer(
                file_id=row.file_id,
                name=row.name,
                is_locked=row.is_locked,
                is_visible=row.is_visible,
                color=row.color,
                line_type=row.line_type,
                line_weight=row.line_weight,
                bounding_box=_bbox_from_row(row),
            )
            for row in rows
        ]

    def get_entities(self, file_id: str) -> list[StoredEntity]:
        query = (
            select(entities_table, layers_table.c.name.label("layer_name"))
            .join(layers_table, entities_table.c.layer_id == layers_table.c.id)
            .where(entities_table.c.file_id == file_id)
            .order_by(entities_table.c.seq)
        )
        with self.engine.connect() as conn:
            rows = conn.execute(query).all()
        return [
            StoredEntity(
                seq=row.seq,
                entity_type=row.entity_type,
                layer=row.layer_name,
                data=row.data,
                bounding_box=_bbox_from_row(row),
            )
            for row in rows
        ]

    @staticmethod
    def _require(conn: Connection, file_id: str) -> None:
        row = conn.execute(select(files_table.c.id).where(files_table.c.id == file_id)).first()
        if row is None:
            raise UnknownFileError(f"文件不存在: {file_id}")
