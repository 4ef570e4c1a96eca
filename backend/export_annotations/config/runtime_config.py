"""
运行期配置 - 读取 config/settings.yaml

职责：
- 加载暂存目录/外部工具/Redis/HTTP端点等运行参数
- 提供环境变量覆盖机制（EXPORT_ANN_ 前缀，__ 分隔嵌套字段）
- 类型安全的配置访问
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


class SharedConfig(BaseModel):
    """共享路径与外部工具配置"""

    dropbox_dir: Path = Path("/var/bigbluebutton/presAnn")
    pdftocairo: str = "/usr/bin/pdftocairo"
    cairosvg: str = "/usr/bin/cairosvg"
    ghostscript: str = "/usr/bin/gs"
    pandoc: str = "/usr/bin/pandoc"


class RedisConfig(BaseModel):
    """Redis配置"""

    host: str = "127.0.0.1"
    port: int = 6379
    password: str | None = None
    publish_channel: str = "to-akka-apps-redis-channel"


class CollectorConfig(BaseModel):
    """Collector阶段配置"""

    png_width_rasterized_slides: int = 2560
    notes_format: str = "pdf"
    notes_markdown_format: str = "txt"


class ProcessConfig(BaseModel):
    """Process阶段配置"""

    max_image_width: int = 1440
    max_image_height: int = 1080
    points_per_inch: float = 72.0
    pixels_per_inch: float = 96.0


class NotifierConfig(BaseModel):
    """Notifier阶段配置"""

    pod_id: str = "DEFAULT_PRESENTATION_POD"
    is_downloadable: bool = False
    beamer_template: Path = Path("config/templates/beamer_template.tex")


class RetryConfig(BaseModel):
    """重试配置（仅共享笔记HTTP下载）"""

    notes_max_retries: int = 3
    default_retry_after_sec: float = 1.0


class TimeoutConfig(BaseModel):
    """超时配置（仅HTTP请求，外部进程不设超时）"""

    http_sec: float = 30.0


class EndpointConfig(BaseModel):
    """外部HTTP端点"""

    web_api: str = "http://127.0.0.1:8090"
    pads_api: str = "http://127.0.0.1:9002"


class MessageConfig(BaseModel):
    """消息名称"""

    status_msg_name: str = "PresAnnStatusMsg"
    file_available_msg_name: str = "NewPresFileAvailableMsg"


class LoggingConfig(BaseModel):
    """日志配置"""

    log_level: str = "INFO"
    log_format: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class RuntimeConfig(BaseSettings):
    """运行期配置（支持环境变量覆盖）"""

    shared: SharedConfig = Field(default_factory=SharedConfig)
    redis: RedisConfig = Field(default_factory=RedisConfig)
    collector: CollectorConfig = Field(default_factory=CollectorConfig)
    process: ProcessConfig = Field(default_factory=ProcessConfig)
    notifier: NotifierConfig = Field(default_factory=NotifierConfig)
    retries: RetryConfig = Field(default_factory=RetryConfig)
    timeouts: TimeoutConfig = Field(default_factory=TimeoutConfig)
    endpoints: EndpointConfig = Field(default_factory=EndpointConfig)
    messages: MessageConfig = Field(default_factory=MessageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {
        "env_prefix": "EXPORT_ANN_",
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

        config = cls(
            shared=SharedConfig(**cls._extract(data, "shared")),
            redis=RedisConfig(**cls._extract(data, "redis")),
            collector=CollectorConfig(**cls._extract(data, "collector")),
            process=ProcessConfig(**cls._extract(data, "process")),
            notifier=NotifierConfig(**cls._extract(data, "notifier")),
            retries=RetryConfig(**cls._extract(data, "retries")),
            timeouts=TimeoutConfig(**cls._extract(data, "timeouts")),
            endpoints=EndpointConfig(**cls._extract(data, "endpoints")),
            messages=MessageConfig(**cls._extract(data, "messages")),
            logging=LoggingConfig(**cls._extract(data, "logging")),
        )

        config._resolve_paths(base_dir=path.parent)
        return config

    @staticmethod
    def _extract(data: dict[str, Any], key: str) -> dict[str, Any]:
        """提取并展平配置（支持 {default: x} 形式的叶子节点）"""
        section = data.get(key) or {}
        result = {}
        for k, v in section.items():
            if isinstance(v, dict) and "default" in v:
                result[k] = v["default"]
            elif not isinstance(v, dict):
                result[k] = v
        return result

    def _resolve_paths(self, base_dir: Path) -> None:
        """解析相对路径配置为绝对路径（基于配置文件所在目录的上一级）"""
        root = base_dir.parent
        template = self.notifier.beamer_template
        if not template.is_absolute():
            self.notifier.beamer_template = (root / template).resolve()

    def get_dropbox_dir(self, job_id: str) -> Path:
        """获取任务暂存目录"""
        return self.shared.dropbox_dir / job_id

    def get_output_dir(self, pres_location: Path, job_id: str) -> Path:
        """获取合并后PDF的输出目录"""
        return pres_location / "pdfs" / job_id

    def ensure_dirs(self) -> None:
        """确保必要目录存在"""
        self.shared.dropbox_dir.mkdir(parents=True, exist_ok=True)


# 全局配置实例
_config: RuntimeConfig | None = None

DEFAULT_CONFIG_PATH = Path("config/settings.yaml")


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
