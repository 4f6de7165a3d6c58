"""SettingsStore: model rules, pub/sub ordering and persistence."""
from __future__ import annotations

import json

import pytest

from inline_chat.config.settings import ChatSettings, SettingsStore, settings_file_path


def _store(tmp_path, **values) -> SettingsStore:
    values.setdefault("models", ("b/model", "a/model", "c/model"))
    return SettingsStore(ChatSettings(**values), path=tmp_path / "settings.json")


def test_models_sorted_and_first_selected_by_default(tmp_path):
    store = _store(tmp_path)
    snap = store.snapshot()

    assert snap.available_models == ["a/model", "b/model", "c/model"]
    assert snap.model_id == "a/model"


def test_unknown_selected_model_falls_back_to_first():
    assert ChatSettings(model_id="zzz", models=("y", "x")).model_id == "x"


def test_snapshot_is_immutable(tmp_path):
    snap = _store(tmp_path).snapshot()
    with pytest.raises(Exception):
        snap.model_id = "other"


def test_remove_last_model_is_rejected(tmp_path):
    store = _store(tmp_path, models=("only/model",))
    with pytest.raises(ValueError, match="Cannot remove the last model"):
        store.remove_model("only/model")


def test_remove_selected_model_reselects_first(tmp_path):
    store = _store(tmp_path, model_id="b/model")
    store.remove_model("b/model")

    assert store.snapshot().model_id == "a/model"
    assert "b/model" not in store.snapshot().models


def test_remove_unknown_model_raises_key_error(tmp_path):
    with pytest.raises(KeyError):
        _store(tmp_path).remove_model("nope")


def test_select_adds_missing_model(tmp_path):
    store = _store(tmp_path)
    store.select_model("z/new")

    assert store.snapshot().model_id == "z/new"
    assert "z/new" in store.snapshot().models


def test_subscribers_notified_in_order(tmp_path):
    store = _store(tmp_path)
    seen = []
    store.subscribe(lambda s: seen.append(("first", s.model_id)))
    store.subscribe(lambda s: seen.append(("second", s.model_id)))

    store.select_model("c/model")

    assert seen == [("first", "c/model"), ("second", "c/model")]


def test_unchanged_update_publishes_nothing(tmp_path):
    store = _store(tmp_path)
    seen = []
    store.subscribe(seen.append)

    store.update(model_id=store.snapshot().model_id)
    store.add_model("a/model")

    assert seen == []


def test_unsubscribed_during_delivery_is_skipped(tmp_path):
    store = _store(tmp_path)
    seen = []

    def second(settings):
        seen.append("second")

    def first(settings):
        seen.append("first")
        store.unsubscribe(second)

    store.subscribe(first)
    store.subscribe(second)
    store.update(system_prompt="changed")

    assert seen == ["first"]


def test_unsubscribe_handle(tmp_path):
    store = _store(tmp_path)
    seen = []
    unsubscribe = store.subscribe(seen.append)
    unsubscribe()
    store.update(system_prompt="changed")

    assert seen == []
    assert store.unsubscribe(seen.append) is False


def test_changes_are_persisted_and_reloaded(tmp_path, monkeypatch):
    path = tmp_path / "settings.json"
    store = SettingsStore(ChatSettings(models=("a/model", "b/model")), path=path)
    store.update(api_key="sk-saved")
    store.select_model("b/model")

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["api_key"] == "sk-saved"
    assert data["model_id"] == "b/model"

    monkeypatch.setenv("INLINE_CHAT_API_KEY", "sk-env")
    reloaded = SettingsStore.load(path).snapshot()
    assert reloaded.api_key == "sk-saved"
    assert reloaded.model_id == "b/model"
    assert reloaded.models == ("a/model", "b/model")


def test_load_uses_env_key_and_catalog_when_nothing_persisted(tmp_path, monkeypatch):
    monkeypatch.setenv("INLINE_CHAT_API_KEY", "sk-env")
    snap = SettingsStore.load(tmp_path / "missing.json").snapshot()

    assert snap.api_key == "sk-env"
    assert "anthropic/claude-3.5-sonnet" in snap.models
    assert snap.model_id == "anthropic/claude-3.5-sonnet"


def test_settings_path_honours_override(tmp_path):
    assert settings_file_path() == tmp_path / "settings" / "settings.json"


def test_masked_hides_key():
    masked = ChatSettings(api_key="sk-abcdefgh1234").masked()
    assert masked["api_key"] == "sk-a…1234"
    assert ChatSettings().masked()["api_key"] == ""
