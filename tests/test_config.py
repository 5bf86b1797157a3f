from __future__ import annotations

from pathlib import Path

import pytest

from nova_chat.config import DEFAULT_SYSTEM_PROMPT, load_config


def test_shipped_config_loads(clean_env, config_path: Path):
    cfg = load_config(str(config_path))
    assert cfg["server"]["cors_origins"] == ["*"]
    assert "Nova" in cfg["persona"]["system_prompt"]
    assert cfg["responder"]["seed"] is None
    assert cfg["client"]["endpoint"] == "/api/chat"


def test_missing_file_uses_defaults(clean_env, tmp_path: Path):
    cfg = load_config(str(tmp_path / "nope.yaml"))
    assert cfg["persona"]["system_prompt"] == DEFAULT_SYSTEM_PROMPT
    assert cfg["client"]["base_url"] == "http://127.0.0.1:8000"


def test_config_path_from_env(clean_env, monkeypatch, tmp_path: Path):
    cfg_file = tmp_path / "c.yaml"
    cfg_file.write_text("client:\n  endpoint: /chat\n", encoding="utf-8")
    monkeypatch.setenv("NOVA_CHAT_CONFIG", str(cfg_file))
    cfg = load_config()
    assert cfg["client"]["endpoint"] == "/chat"
    # untouched sibling keys keep their defaults
    assert cfg["client"]["base_url"] == "http://127.0.0.1:8000"


def test_env_overrides(clean_env, monkeypatch, tmp_path: Path):
    monkeypatch.setenv("NOVA_CHAT__RESPONDER__SEED", "3")
    monkeypatch.setenv("NOVA_CHAT__SERVER__CORS_ORIGINS", "http://a.test, http://b.test")
    monkeypatch.setenv("NOVA_CHAT__CLIENT__BASE_URL", "http://example.test")
    monkeypatch.setenv("NOVA_CHAT__EXTRA__DEBUG", "true")
    cfg = load_config(str(tmp_path / "nope.yaml"))
    assert cfg["responder"]["seed"] == 3
    assert cfg["server"]["cors_origins"] == ["http://a.test", "http://b.test"]
    assert cfg["client"]["base_url"] == "http://example.test"
    assert cfg["extra"]["debug"] is True


def test_invalid_yaml_raises(clean_env, tmp_path: Path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("server: [unclosed\n", encoding="utf-8")
    with pytest.raises(RuntimeError, match="Failed to parse"):
        load_config(str(bad))


def test_non_mapping_yaml_raises(clean_env, tmp_path: Path):
    bad = tmp_path / "list.yaml"
    bad.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(RuntimeError, match="expected dict"):
        load_config(str(bad))
