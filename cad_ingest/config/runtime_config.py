"""
运行期配置 - 读取 config/runtime.yaml

职责：
- 加载并发/超时/编码/数据库/路径等运行参数
- 提供环境变量覆盖机制（前缀 CADINGEST_，嵌套分隔符 __）
- 类型安全的配置访问
- 日志初始化
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

DEFAULT_CONFIG_PATH = Path("config/runtime.yaml")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class ConcurrencyConfig(BaseModel):
    """并发配置"""

    max_workers: int = 2


class TimeoutConfig(BaseModel):
    """超时配置"""

    # parsing 状态超过该时长视为崩溃遗留，允许重新获取
    parse_stale_sec: int = 1800
    wait_sec: int = 300


class EncodingConfig(BaseModel):
    """原始内容解码配置"""

    candidates: list[str] = Field(default_factory=lambda: ["utf-8-sig", "gb18030"])


class DatabaseConfig(BaseModel):
    """数据库配置"""

    url: str = "sqlite:///storage/cad_ingest.db"
    echo: bool = False


class LoggingConfig(BaseModel):
    """日志配置"""

    log_level: str = "INFO"
    log_to_file: bool = True


class RuntimeConfig(BaseSettings):
    """运行期配置（支持环境变量覆盖）"""

    # 基础路径
    base_dir: Path = Path(".")
    storage_dir: Path = Path("storage")

    # 各子配置
    concurrency: ConcurrencyConfig = Field(default_factory=ConcurrencyConfig)
    timeouts: TimeoutConfig = Field(default_factory=TimeoutConfig)
    encoding: EncodingConfig = Field(default_factory=EncodingConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {
        "env_prefix": "CADINGEST_",
        "env_nested_delimiter": "__",
        "arbitrary_types_allowed": True,
    }

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> RuntimeConfig:
        """从YAML文件加载配置"""
        path = Path(yaml_path)
        if not path.exists():
            return cls()

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        runtime_opts = data.get("runtime_options", {})

        config = cls(
            concurrency=ConcurrencyConfig(**cls._extract(runtime_opts, "concurrency")),
            timeouts=TimeoutConfig(**cls._extract(runtime_opts, "timeouts")),
            encoding=EncodingConfig(**cls._extract(runtime_opts, "encoding")),
            database=DatabaseConfig(**cls._extract(runtime_opts, "database")),
            logging=LoggingConfig(**cls._extract(runtime_opts, "logging")),
        )

        storage_dir = runtime_opts.get("storage_dir")
        if storage_dir:
            config.storage_dir = Path(storage_dir)
        config._resolve_paths(base_dir=path.parent)
        return config

    @staticmethod
    def _extract(data: dict[str, Any], key: str) -> dict[str, Any]:
        """提取并展平配置"""
        section = data.get(key, {}) or {}
        result = {}
        for k, v in section.items():
            if isinstance(v, dict) and "default" in v:
                result[k] = v["default"]
            elif not isinstance(v, dict):
                result[k] = v
        return result

    def _resolve_paths(self, base_dir: Path) -> None:
        """解析相对路径配置为绝对路径（基于配置文件所在目录）"""
        if not self.storage_dir.is_absolute():
            self.storage_dir = (base_dir / self.storage_dir).resolve()

    def get_file_dir(self, file_id: str) -> Path:
        """获取文件存储目录"""
        return self.storage_dir / "files" / file_id

    def ensure_dirs(self) -> None:
        """确保必要目录存在"""
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        (self.storage_dir / "files").mkdir(exist_ok=True)

    def setup_logging(self) -> None:
        """按配置初始化根日志器"""
        root = logging.getLogger()
        root.setLevel(self.logging.log_level.upper())

        has_console = any(
            isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
            for h in root.handlers
        )
        if not has_console:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            root.addHandler(handler)

        if self.logging.log_to_file:
            log_dir = self.storage_dir / "logs"
            log_dir.mkdir(parents=True, exist_ok=True)
            log_file = (log_dir / "cad_ingest.log").resolve()
            exists = any(
                isinstance(h, logging.FileHandler) and Path(h.baseFilename) == log_file
                for h in root.handlers
            )
            if not exists:
                file_handler = logging.FileHandler(log_file, encoding="utf-8")
                file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
                root.addHandler(file_handler)


# 全局配置实例
_config: RuntimeConfig | None = None


def get_config() -> RuntimeConfig:
    """获取全局配置（惰性加载）"""
    global _config
    if _config is None:
        _config = RuntimeConfig.from_yaml(DEFAULT_CONFIG_PATH)
    return _config


def reload_config(yaml_path: str | Path | None = None) -> RuntimeConfig:
    """重新加载配置"""
    global _config
    path = yaml_path or DEFAULT_CONFIG_PATH
    _config = RuntimeConfig.from_yaml(path)
    return _config
