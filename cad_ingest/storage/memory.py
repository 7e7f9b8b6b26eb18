"""
内存持久化网关 - 单进程内的状态与解析结果存储

- 单飞获取在锁内完成"读状态 + 条件写"，等价于状态列上的比较交换
- 解析结果整体替换：先在锁外构建新快照，锁内一次性替换，读方不会看到半成品
"""

from __future__ import annotations

import threading

from ..interfaces import IParseStore, PersistenceError, UnknownFileError
from ..models import FileRecord, ParseStatus, StoredEntity, StoredLayer


class MemoryParseStore(IParseStore):
    """基于字典的持久化网关"""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._files: dict[str, FileRecord] = {}
        self._layers: dict[str, list[StoredLayer]] = {}
        self._entities: dict[str, list[StoredEntity]] = {}

    def register_file(self, file_id: str, name: str = "") -> FileRecord:
        with self._lock:
            record = FileRecord(file_id=file_id, name=name)
            self._files[file_id] = record
            self._layers.pop(file_id, None)
            self._entities.pop(file_id, None)
            return record.model_copy()

    def get_file(self, file_id: str) -> FileRecord | None:
        with self._lock:
            record = self._files.get(file_id)
            return record.model_copy() if record else None

    def try_mark_parsing(self, file_id: str, stale_after_sec: float | None = None) -> bool:
        with self._lock:
            record = self._require(file_id)
            if record.status == ParseStatus.PARSING and not record.is_stale(stale_after_sec):
                return False
            record.mark_parsing()
            return True

    def set_status(self, file_id: str, status: ParseStatus, error: str | None = None) -> None:
        with self._lock:
            record = self._require(file_id)
            if status == ParseStatus.FAILED:
                record.mark_failed(error or "")
            elif status == ParseStatus.PARSED:
                record.mark_parsed()
            elif status == ParseStatus.PARSING:
                record.mark_parsing()
            else:
                record.status = status
                record.parse_error = error

    def replace_parse_results(
        self,
        file_id: str,
        layers: list[StoredLayer],
        entities: list[StoredEntity],
    ) -> None:
        layer_names = {layer.name for layer in layers}
        orphans = sorted({e.layer for e in entities} - layer_names)
        if orphans:
            raise PersistenceError(f"实体引用了未写入的图层: {orphans}")

        new_layers = sorted((layer.model_copy() for layer in layers), key=lambda l: l.name)
        new_entities = sorted((e.model_copy() for e in entities), key=lambda e: e.seq)

        with self._lock:
            record = self._require(file_id)
            self._layers[file_id] = new_layers
            self._entities[file_id] = new_entities
            record.mark_parsed()

    def get_layers(self, file_id: str) -> list[StoredLayer]:
        with self._lock:
            return [layer.model_copy() for layer in self._layers.get(file_id, [])]

    def get_entities(self, file_id: str) -> list[StoredEntity]:
        with self._lock:
            return [e.model_copy() for e in self._entities.get(file_id, [])]

    def reset_status(self, file_id: str) -> None:
        with self._lock:
            record = self._require(file_id)
            record.status = ParseStatus.UPLOADED
            record.parse_started_at = None

    def _require(self, file_id: str) -> FileRecord:
        record = self._files.get(file_id)
        if record is None:
            raise UnknownFileError(f"文件不存在: {file_id}")
        return record
