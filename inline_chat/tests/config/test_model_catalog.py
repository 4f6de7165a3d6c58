"""Default model list loading and fallback notifications."""
from __future__ import annotations

import json

import pytest

from inline_chat.config.defaults import FALLBACK_MODEL
from inline_chat.config.model_catalog import ModelCatalogError, load_default_models, read_models


def test_packaged_catalog_is_readable():
    models = read_models()
    assert "anthropic/claude-3.5-sonnet" in models
    assert len(models) == len(set(models))


def test_yaml_catalog(tmp_path):
    path = tmp_path / "models.yaml"
    path.write_text("defaultModels:\n  - a/one\n  - b/two\n", encoding="utf-8")
    assert read_models(path) == ["a/one", "b/two"]


@pytest.mark.parametrize(
    "content,kind",
    [
        ("{broken", "invalid"),
        (json.dumps({"models": ["x"]}), "invalid"),
        (json.dumps({"defaultModels": []}), "error"),
    ],
)
def test_read_models_failure_kinds(tmp_path, content, kind):
    path = tmp_path / "models.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ModelCatalogError) as info:
        read_models(path)
    assert info.value.kind == kind


@pytest.mark.parametrize(
    "content,title",
    [
        (None, "Configuration Not Found"),
        ("{broken", "Invalid Configuration"),
        (json.dumps({"defaultModels": []}), "Configuration Error"),
    ],
)
def test_fallback_notifies_with_kind_title(tmp_path, notifier, content, title):
    path = tmp_path / "models.json"
    if content is not None:
        path.write_text(content, encoding="utf-8")

    models = load_default_models(path, notifier=notifier)

    assert models == [FALLBACK_MODEL]
    assert notifier.errors[0][0] == title
    assert "Using default model" in notifier.errors[0][1]


def test_results_are_cached_per_source(tmp_path, notifier):
    path = tmp_path / "models.json"
    path.write_text(json.dumps({"defaultModels": ["a/one"]}), encoding="utf-8")
    assert load_default_models(path) == ["a/one"]

    path.write_text(json.dumps({"defaultModels": ["b/two"]}), encoding="utf-8")
    assert load_default_models(path, notifier=notifier) == ["a/one"]
    assert notifier.errors == []
