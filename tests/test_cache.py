from __future__ import annotations

from pathlib import Path

from routewise_engine.sources.cache import ModelListingCache


def test_cache_store(tmp_path: Path) -> None:
    cache = ModelListingCache(tmp_path / "models.json")
    cache.save({"data": [{"id": "acme/a"}]})
    assert cache.load() == {"data": [{"id": "acme/a"}]}


def test_cache_save_overwrites_previous_payload(tmp_path: Path) -> None:
    cache = ModelListingCache(tmp_path / "models.json")
    cache.save({"data": [{"id": "acme/a"}], "extra": True})
    cache.save({"data": [{"id": "acme/b"}]})

    assert ModelListingCache(tmp_path / "models.json").load() == {"data": [{"id": "acme/b"}]}


def test_cache_save_copies_payload(tmp_path: Path) -> None:
    cache = ModelListingCache(tmp_path / "nested" / "models.json")
    payload = {"data": [{"id": "acme/a"}]}
    cache.save(payload)
    payload["data"].append({"id": "acme/b"})

    assert cache.load() == {"data": [{"id": "acme/a"}]}


def test_cache_treats_malformed_content_as_miss(tmp_path: Path) -> None:
    path = tmp_path / "models.json"
    cache = ModelListingCache(path)

    path.write_text("{broken", encoding="utf-8")
    assert cache.load() is None

    path.write_text("[1, 2, 3]", encoding="utf-8")
    assert cache.load() is None

    path.write_text('{"data": "nope"}', encoding="utf-8")
    assert cache.load() is None


def test_cache_clear(tmp_path: Path) -> None:
    cache = ModelListingCache(tmp_path / "models.json")
    assert cache.clear() is False

    cache.save({"data": []})
    assert cache.clear() is True
    assert cache.load() is None
