"""Tests covering the :mod:`query_cache` package surface."""

from __future__ import annotations

import importlib
import sys

import pytest


@pytest.fixture()
def cleanup_modules(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("query_cache", "query_cache.cache", "query_cache.runtime"):
        monkeypatch.delitem(sys.modules, name, raising=False)


def test_import_exposes_version(cleanup_modules: None) -> None:
    module = importlib.import_module("query_cache")

    assert module is sys.modules["query_cache"]
    assert isinstance(module.__version__, str)
    assert module.__version__


def test_top_level_exports_are_usable(cleanup_modules: None) -> None:
    module = importlib.import_module("query_cache")

    store = module.CacheStore()
    adapter = module.ReadThroughCache(store)

    assert adapter.store is store
    assert module.generate_key("acct", {"id": 1}) == "acct:id:1"
