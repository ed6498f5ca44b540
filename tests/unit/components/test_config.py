"""
Unit tests for config loading: defaults, TOML file, env overrides.
"""

from domdecode.config import Config, get_config, get_config_path, load_config, reset_config


class TestConfig:
    def test_defaults(self):
        config = Config()
        assert config.walk.max_depth == 10_000
        assert config.cli.indent == 2

    def test_xdg_path(self, monkeypatch, tmp_path):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert get_config_path() == tmp_path / "domdecode" / "config.toml"

    def test_toml_file(self, monkeypatch, tmp_path):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        monkeypatch.delenv("DOMDECODE_MAX_DEPTH", raising=False)
        monkeypatch.delenv("DOMDECODE_INDENT", raising=False)
        path = tmp_path / "domdecode" / "config.toml"
        path.parent.mkdir()
        path.write_text("[walk]\nmax_depth = 64\n\n[cli]\nindent = 4\n")
        config = load_config()
        assert config.walk.max_depth == 64
        assert config.cli.indent == 4

    def test_env_overrides_file(self, monkeypatch, tmp_path):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        path = tmp_path / "domdecode" / "config.toml"
        path.parent.mkdir()
        path.write_text("[walk]\nmax_depth = 64\n")
        monkeypatch.setenv("DOMDECODE_MAX_DEPTH", "8")
        assert load_config().walk.max_depth == 8

    def test_bad_env_value_ignored(self, monkeypatch, tmp_path):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        monkeypatch.setenv("DOMDECODE_MAX_DEPTH", "lots")
        assert load_config().walk.max_depth == 10_000

    def test_broken_file_falls_back(self, monkeypatch, tmp_path, caplog):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        monkeypatch.delenv("DOMDECODE_MAX_DEPTH", raising=False)
        path = tmp_path / "domdecode" / "config.toml"
        path.parent.mkdir()
        path.write_text("[walk\n")
        assert load_config().walk.max_depth == 10_000
        assert "Ignoring unreadable config file" in caplog.text

    def test_get_config_caches(self, monkeypatch, tmp_path):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        reset_config()
        try:
            assert get_config() is get_config()
        finally:
            reset_config()
