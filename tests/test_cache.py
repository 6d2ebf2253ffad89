"""Tests for the cache module."""

import pytest

from koekoi.cache import (
    file_hash,
    get_cached_transcription,
    store_transcription_cache,
)


@pytest.fixture(autouse=True)
def isolated_cache(tmp_path, monkeypatch):
    """Redirect cache to tmp_path so tests don't pollute the real cache."""
    monkeypatch.setattr("koekoi.cache.CACHE_DIR", tmp_path / "cache")


def test_file_hash_deterministic(tmp_path):
    f = tmp_path / "take.wav"
    f.write_bytes(b"RIFF" + b"\x00" * 100)
    assert file_hash(f) == file_hash(f)
    assert len(file_hash(f)) == 64  # SHA-256 hex


def test_file_hash_different_content(tmp_path):
    f1 = tmp_path / "a.wav"
    f2 = tmp_path / "b.wav"
    f1.write_bytes(b"hello")
    f2.write_bytes(b"world")
    assert file_hash(f1) != file_hash(f2)


def test_transcription_cache_miss():
    assert get_cached_transcription("hash", "base", "ja") is None


def test_transcription_cache_roundtrip():
    result = {
        "text": "今日はいい天気",
        "segments": [{"text": "今日はいい天気", "start": 0.0, "end": 1.2}],
        "language": "ja",
    }
    store_transcription_cache("abc123", "base", "ja", result)
    assert get_cached_transcription("abc123", "base", "ja") == result


def test_transcription_cache_keyed_by_model_and_language():
    store_transcription_cache("abc123", "base", "ja", {"text": "x", "segments": []})
    assert get_cached_transcription("abc123", "small", "ja") is None
    assert get_cached_transcription("abc123", "base", "ko") is None


def test_transcription_cache_ignores_corrupt_file(tmp_path):
    path = tmp_path / "cache" / "whisper" / "bad_base_ja.json"
    path.parent.mkdir(parents=True)
    path.write_text("{not json")
    assert get_cached_transcription("bad", "base", "ja") is None
