"""
配置加载单元测试
"""

import logging
from pathlib import Path

import pytest

from export_annotations.config import RuntimeConfig, configure_logging, reload_config


class TestRuntimeConfig:
    """运行期配置测试"""

    def test_default_config(self):
        """测试默认配置"""
        config = RuntimeConfig()
        assert config.collector.png_width_rasterized_slides == 2560
        assert config.process.max_image_width == 1440
        assert config.process.max_image_height == 1080
        assert config.retries.notes_max_retries == 3
        assert config.messages.status_msg_name == "PresAnnStatusMsg"

    def test_missing_yaml_uses_defaults(self, temp_dir: Path):
        config = RuntimeConfig.from_yaml(temp_dir / "nope.yaml")
        assert config.redis.port == 6379

    def test_from_yaml_flattens_defaults(self, temp_dir: Path):
        """支持 {default: x} 形式的叶子节点"""
        config_dir = temp_dir / "config"
        config_dir.mkdir()
        yaml_path = config_dir / "settings.yaml"
        yaml_path.write_text(
            "shared:\n"
            f"  dropbox_dir: {temp_dir / 'dropbox'}\n"
            "redis:\n"
            "  host: redis.internal\n"
            "retries:\n"
            "  notes_max_retries:\n"
            "    default: 5\n"
            "    desc: 最大重试次数\n"
            "notifier:\n"
            "  beamer_template: config/templates/beamer.tex\n",
            encoding="utf-8",
        )

        config = RuntimeConfig.from_yaml(yaml_path)

        assert config.redis.host == "redis.internal"
        assert config.retries.notes_max_retries == 5
        assert config.shared.dropbox_dir == temp_dir / "dropbox"
        assert config.notifier.beamer_template == (temp_dir / "config/templates/beamer.tex").resolve()

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("EXPORT_ANN_REDIS__HOST", "redis.env")
        monkeypatch.setenv("EXPORT_ANN_PROCESS__MAX_IMAGE_WIDTH", "2000")

        config = RuntimeConfig()
        assert config.redis.host == "redis.env"
        assert config.process.max_image_width == 2000

    def test_path_helpers(self, runtime_config: RuntimeConfig, temp_dir: Path):
        assert runtime_config.get_dropbox_dir("job-1") == temp_dir / "dropbox" / "job-1"
        assert runtime_config.get_output_dir(Path("/pres"), "job-1") == Path("/pres/pdfs/job-1")

    def test_ensure_dirs(self, runtime_config: RuntimeConfig):
        runtime_config.ensure_dirs()
        assert runtime_config.shared.dropbox_dir.is_dir()

    def test_reload_config(self, temp_dir: Path):
        yaml_path = temp_dir / "settings.yaml"
        yaml_path.write_text("timeouts:\n  http_sec: 5\n", encoding="utf-8")
        assert reload_config(yaml_path).timeouts.http_sec == 5


class TestLogging:
    """日志初始化测试"""

    def test_configure_logging_level(self):
        root = logging.getLogger()
        previous = root.level
        config = RuntimeConfig()
        config.logging.log_level = "DEBUG"
        try:
            configure_logging(config)
            assert root.level == logging.DEBUG
        finally:
            root.setLevel(previous)
