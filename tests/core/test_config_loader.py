import pytest

from eventcore import metrics
from eventcore.config import ConfigError, as_dict, get_config


def _write(dir_, name, text):
    (dir_ / name).write_text(text, encoding="utf-8")


def test_defaults_when_no_files(empty_config_dir):
    cfg = get_config()
    assert cfg.dispatch.slow_handler_ms is None
    assert cfg.dispatch.log_failures is True
    assert cfg.handlers.modules == []
    assert cfg.logging.level == "info"
    assert cfg.metrics.enabled is True


def test_overrides_file_wins(empty_config_dir):
    _write(
        empty_config_dir,
        "base.yaml",
        "dispatch:\n  slow_handler_ms: 50\nlogging:\n  level: warn\n",
    )
    _write(
        empty_config_dir,
        "overrides.local.yaml",
        "dispatch:\n  slow_handler_ms: 250\n",
    )
    cfg = get_config()
    assert cfg.dispatch.slow_handler_ms == 250
    assert cfg.logging.level == "warn"


def test_env_override_metric_and_logging(empty_config_dir, monkeypatch, caplog):
    monkeypatch.setenv("EVENTCORE__DISPATCH__SLOW_HANDLER_MS", "75")
    monkeypatch.setenv("EVENTCORE__HANDLERS__MODULES", "[app.handlers]")
    with caplog.at_level("INFO", logger="eventcore.config"):
        cfg = as_dict()
    assert cfg["dispatch"]["slow_handler_ms"] == 75
    assert cfg["handlers"]["modules"] == ["app.handlers"]
    counters = metrics.snapshot()["counters"]
    assert any(
        k.startswith("env_override_total{path=dispatch.slow_handler_ms")
        for k in counters
    )
    messages = [r.getMessage() for r in caplog.records]
    assert any("config-env-override" in m for m in messages)
    assert not any("75" in m for m in messages)


def test_unknown_section_rejected(empty_config_dir):
    _write(empty_config_dir, "base.yaml", "llm:\n  primary: {}\n")
    with pytest.raises(ConfigError):
        get_config()


def test_unknown_key_rejected(empty_config_dir):
    _write(empty_config_dir, "base.yaml", "dispatch:\n  retries: 3\n")
    with pytest.raises(ConfigError):
        get_config()


def test_bad_logging_level_rejected(empty_config_dir):
    _write(empty_config_dir, "base.yaml", "logging:\n  level: loud\n")
    with pytest.raises(ConfigError):
        get_config()


def test_slow_handler_bound_checked(empty_config_dir):
    _write(empty_config_dir, "base.yaml", "dispatch:\n  slow_handler_ms: 0\n")
    with pytest.raises(ConfigError) as exc:
        get_config()
    assert "config-out-of-range" in str(exc.value)
    counters = metrics.snapshot()["counters"]
    assert any(
        k.startswith("config_validation_errors_total") for k in counters
    )


def test_default_dispatcher_uses_config(empty_config_dir):
    _write(
        empty_config_dir,
        "base.yaml",
        "dispatch:\n  slow_handler_ms: 20\n  log_failures: false\n",
    )
    from eventcore.dispatcher import get_dispatcher

    d = get_dispatcher()
    assert d.slow_handler_ms == 20
    assert d.log_failures is False
    assert get_dispatcher() is d


def test_host_configs_dir_ignored_without_env(tmp_path, monkeypatch):
    host_cfg = tmp_path / "configs"
    host_cfg.mkdir()
    (host_cfg / "base.yaml").write_text(
        "llm:\n  primary: {}\ndispatch:\n  slow_handler_ms: 5\n",
        encoding="utf-8",
    )
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("EVENTCORE_CONFIG_DIR", raising=False)
    cfg = get_config()
    assert cfg.dispatch.slow_handler_ms is None

    import eventcore

    eventcore.dispatch("unregistered_event")
    assert eventcore.handlers_for("unregistered_event") == []
