"""
持久化网关与内容提供者单元测试

两种网关实现（内存 / SQLAlchemy + SQLite 内存库）共用同一组契约测试。

每个模块完成后必须运行：pytest tests/unit/test_storage.py -v
"""

import threading
import time
from pathlib import Path

import pytest

from cad_ingest.interfaces import ContentReadError, PersistenceError, UnknownFileError
from cad_ingest.models import ParseStatus, StoredEntity, StoredLayer, to_stored_rows
from cad_ingest.storage import (
    InMemoryContentProvider,
    LocalContentProvider,
    MemoryParseStore,
    SqlParseStore,
)


@pytest.fixture(params=["memory", "sql"])
def any_store(request):
    """内存网关与 SQL 网关"""
    if request.param == "memory":
        return MemoryParseStore()
    return SqlParseStore.from_url("sqlite://")


def _rows(parser, text: str, file_id: str = "f1"):
    return to_stored_rows(file_id, parser.parse(text))


class TestFileStatus:
    """文件状态测试"""

    def test_register_and_get(self, any_store):
        """测试登记后为 uploaded"""
        any_store.register_file("f1", "plan.dxf")
        record = any_store.get_file("f1")
        assert record.status == ParseStatus.UPLOADED
        assert record.name == "plan.dxf"
        assert any_store.get_file("missing") is None

    def test_try_mark_parsing_cas(self, any_store):
        """测试条件更新单飞：第二次获取失败"""
        any_store.register_file("f1")
        assert any_store.try_mark_parsing("f1")
        assert not any_store.try_mark_parsing("f1")
        assert any_store.get_file("f1").status == ParseStatus.PARSING

    def test_try_mark_parsing_after_terminal_state(self, any_store):
        """测试 parsed/failed 状态允许重新获取"""
        any_store.register_file("f1")
        any_store.try_mark_parsing("f1")
        any_store.set_status("f1", ParseStatus.FAILED, "boom")
        assert any_store.try_mark_parsing("f1")
        any_store.set_status("f1", ParseStatus.PARSED)
        assert any_store.try_mark_parsing("f1")

    def test_stale_parsing_reclaimed(self, any_store):
        """测试超时的 parsing 状态可被重新获取"""
        any_store.register_file("f1")
        assert any_store.try_mark_parsing("f1", stale_after_sec=60)
        assert not any_store.try_mark_parsing("f1", stale_after_sec=60)
        time.sleep(0.05)
        assert any_store.try_mark_parsing("f1", stale_after_sec=0.01)

    def test_reset_status(self, any_store):
        """测试人工复位卡住的 parsing"""
        any_store.register_file("f1")
        any_store.try_mark_parsing("f1")
        any_store.reset_status("f1")
        assert any_store.get_file("f1").status == ParseStatus.UPLOADED
        assert any_store.try_mark_parsing("f1")

    def test_failed_keeps_error(self, any_store):
        """测试失败信息记录与成功后清除"""
        any_store.register_file("f1")
        any_store.set_status("f1", ParseStatus.FAILED, "read error")
        assert any_store.get_file("f1").parse_error == "read error"
        any_store.set_status("f1", ParseStatus.PARSED)
        assert any_store.get_file("f1").parse_error is None

    def test_unknown_file(self, any_store):
        """测试未登记文件"""
        with pytest.raises(UnknownFileError):
            any_store.try_mark_parsing("missing")
        with pytest.raises(UnknownFileError):
            any_store.set_status("missing", ParseStatus.FAILED, "x")
        with pytest.raises(UnknownFileError):
            any_store.replace_parse_results("missing", [], [])
        with pytest.raises(LookupError):
            any_store.reset_status("missing")


class TestParseResults:
    """解析结果持久化测试"""

    def test_replace_results_commits(self, any_store, parser, sample_dxf):
        """测试写入结果并置为 parsed"""
        any_store.register_file("f1")
        any_store.try_mark_parsing("f1")
        layers, entities = _rows(parser, sample_dxf)
        any_store.replace_parse_results("f1", layers, entities)

        assert any_store.get_file("f1").status == ParseStatus.PARSED
        stored_layers = any_store.get_layers("f1")
        assert [l.name for l in stored_layers] == ["0", "HIDDEN", "LAYER1", "WALL"]
        hidden = next(l for l in stored_layers if l.name == "HIDDEN")
        assert not hidden.is_visible
        assert hidden.bounding_box is not None

        stored_entities = any_store.get_entities("f1")
        assert stored_entities == entities

    def test_replace_results_overwrites(self, any_store, parser, sample_dxf, line_ellipse_dxf):
        """测试重新解析整体覆盖（不合并）"""
        any_store.register_file("f1")
        any_store.replace_parse_results("f1", *_rows(parser, sample_dxf))
        any_store.replace_parse_results("f1", *_rows(parser, line_ellipse_dxf))

        assert [l.name for l in any_store.get_layers("f1")] == ["0", "LAYER1"]
        assert [e.entity_type for e in any_store.get_entities("f1")] == ["LINE"]

    def test_replace_results_idempotent(self, any_store, parser, sample_dxf):
        """测试同一内容重复写入结果一致"""
        any_store.register_file("f1")
        any_store.replace_parse_results("f1", *_rows(parser, sample_dxf))
        first = (any_store.get_layers("f1"), any_store.get_entities("f1"))
        any_store.replace_parse_results("f1", *_rows(parser, sample_dxf))
        assert (any_store.get_layers("f1"), any_store.get_entities("f1")) == first

    def test_replace_results_rollback(self, any_store, parser, sample_dxf):
        """测试写入失败时旧结果保持不变"""
        any_store.register_file("f1")
        layers, entities = _rows(parser, sample_dxf)
        any_store.replace_parse_results("f1", layers, entities)

        broken = [StoredEntity(seq=0, entity_type="LINE", layer="NOT_WRITTEN")]
        with pytest.raises(PersistenceError):
            any_store.replace_parse_results("f1", [StoredLayer(file_id="f1", name="0")], broken)

        assert len(any_store.get_layers("f1")) == len(layers)
        assert any_store.get_entities("f1") == entities

    def test_results_isolated_per_file(self, any_store, parser, sample_dxf, line_ellipse_dxf):
        """测试不同文件结果互不影响"""
        any_store.register_file("f1")
        any_store.register_file("f2")
        any_store.replace_parse_results("f1", *_rows(parser, sample_dxf, "f1"))
        any_store.replace_parse_results("f2", *_rows(parser, line_ellipse_dxf, "f2"))
        assert len(any_store.get_entities("f1")) == 5
        assert len(any_store.get_entities("f2")) == 1


class TestMemoryStoreConcurrency:
    """内存网关并发测试"""

    def test_concurrent_mark_parsing(self):
        """测试并发获取只有一个成功"""
        store = MemoryParseStore()
        store.register_file("f1")
        barrier = threading.Barrier(8)
        results: list[bool] = []
        lock = threading.Lock()

        def worker():
            barrier.wait()
            acquired = store.try_mark_parsing("f1")
            with lock:
                results.append(acquired)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count(True) == 1


class TestSqlStore:
    """SQL 网关测试"""

    def test_file_database(self, temp_dir: Path, parser, sample_dxf):
        """测试文件库跨实例可见"""
        url = f"sqlite:///{temp_dir / 'ingest.db'}"
        store = SqlParseStore.from_url(url)
        store.register_file("f1")
        store.replace_parse_results("f1", *_rows(parser, sample_dxf))
        store.engine.dispose()

        reopened = SqlParseStore.from_url(url)
        assert reopened.get_file("f1").status == ParseStatus.PARSED
        assert len(reopened.get_entities("f1")) == 5
        reopened.engine.dispose()


class TestContentProviders:
    """内容提供者测试"""

    def test_in_memory(self):
        """测试内存提供者"""
        provider = InMemoryContentProvider()
        provider.put("f1", "0\nEOF\n")
        assert provider.read("f1") == b"0\nEOF\n"
        with pytest.raises(ContentReadError):
            provider.read("missing")

    def test_local_original(self, runtime_config):
        """测试读取 original.dxf"""
        provider = LocalContentProvider(runtime_config)
        path = provider.save("f1", b"0\nEOF\n")
        assert path.name == "original.dxf"
        assert provider.read("f1") == b"0\nEOF\n"

    def test_local_fallback_first_dxf(self, runtime_config):
        """测试缺少 original.dxf 时取目录下第一个 dxf"""
        file_dir = runtime_config.get_file_dir("f2")
        file_dir.mkdir(parents=True)
        (file_dir / "b.dxf").write_bytes(b"B")
        (file_dir / "a.dxf").write_bytes(b"A")
        assert LocalContentProvider(runtime_config).read("f2") == b"A"

    def test_local_missing(self, runtime_config):
        """测试文件不存在"""
        with pytest.raises(ContentReadError):
            LocalContentProvider(runtime_config).read("missing")
