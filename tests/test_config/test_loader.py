"""配置加载器测试

测试 YAML 配置加载和配置管理功能
"""

import pytest

from yseq.config import (
    AppSettings,
    ConfigLoader,
    load_yaml_config,
)


class TestConfigLoader:
    """ConfigLoader 测试"""

    def test_load_yaml_config(self, sample_yaml_config):
        """测试加载 YAML 配置"""
        config = ConfigLoader.load(sample_yaml_config, use_cache=False)

        assert config["app_name"] == "Test Application"
        assert config["debug"] is True
        assert config["sequence"]["field_name"] == "position"

    def test_config_caching(self, sample_yaml_config):
        """测试配置缓存"""
        ConfigLoader.clear_cache()

        config1 = ConfigLoader.load(sample_yaml_config, use_cache=True)
        config2 = ConfigLoader.load(sample_yaml_config, use_cache=True)

        assert config1 is config2
        assert len(ConfigLoader.get_cached_paths()) == 1

    def test_reload_config(self, temp_file):
        """测试缓存在 reload 之前不会刷新"""
        ConfigLoader.clear_cache()
        path = temp_file("config/reload.yaml", "app_name: first\n")
        ConfigLoader.load(path)

        with open(path, "w", encoding="utf-8") as f:
            f.write("app_name: second\n")

        assert ConfigLoader.load(path)["app_name"] == "first"
        assert ConfigLoader.reload(path)["app_name"] == "second"

    def test_file_not_found(self, temp_dir):
        """测试配置文件不存在"""
        with pytest.raises(FileNotFoundError):
            ConfigLoader.load("missing.yaml", base_dir=temp_dir)

    def test_empty_file(self, temp_file):
        """测试空文件返回空字典"""
        path = temp_file("config/empty.yaml", "")

        assert ConfigLoader.load(path, use_cache=False) == {}


class TestLoadYamlConfig:
    """load_yaml_config 测试"""

    def test_load_settings(self, sample_yaml_config):
        """测试加载为 AppSettings"""
        settings = load_yaml_config(sample_yaml_config)

        assert isinstance(settings, AppSettings)
        assert settings.app_name == "Test Application"
        assert settings.logging.level == "DEBUG"
        assert settings.sequence.group == "category_id"
        assert settings.sequence.order_from_1 is True

    def test_overrides(self, sample_yaml_config):
        """测试关键字参数覆盖 YAML"""
        settings = load_yaml_config(sample_yaml_config, app_name="Override")

        assert settings.app_name == "Override"
        # 覆盖不污染缓存
        assert ConfigLoader.load(sample_yaml_config)["app_name"] == "Test Application"

    def test_yaml_wins_over_env(self, sample_yaml_config, monkeypatch):
        """测试 YAML 中的值优先于环境变量"""
        monkeypatch.setenv("YSEQ_SEQUENCE_FIELD_NAME", "from_env")

        settings = load_yaml_config(sample_yaml_config)

        assert settings.sequence.field_name == "position"

    def test_sequence_defaults_from_yaml(self, sample_yaml_config):
        """测试 YAML 配置作为排序默认值"""
        from yseq.orm.sequence import SequenceRegistry

        settings = load_yaml_config(sample_yaml_config)
        registry = SequenceRegistry()
        registry.configure_defaults(settings.sequence)

        assert registry.defaults["field_name"] == "position"
        assert registry.defaults["group"] == ("category_id",)
