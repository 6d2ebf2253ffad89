"""Tests for phrase list loading."""

import json

import pytest

from koekoi.drill.phrases import load_phrases, shuffle_phrases
from koekoi.types import Phrase


def _write(path, data):
    path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
    return path


def test_load_phrases(tmp_path):
    path = _write(tmp_path / "n5.json", [
        {"spoken": "今日は", "expected": "今日は", "reading": "きょうは",
         "english": "Today", "grammar": "は"},
        {"spoken": "はい", "expected": "はい"},
    ])
    phrases = load_phrases(path)
    assert len(phrases) == 2
    assert phrases[0].reading == "きょうは"
    assert phrases[1] == Phrase(spoken="はい", expected="はい")


def test_invalid_entry_names_index(tmp_path):
    path = _write(tmp_path / "bad.json", [
        {"spoken": "はい", "expected": "はい"},
        {"spoken": "いいえ"},
    ])
    with pytest.raises(ValueError, match="phrase 1"):
        load_phrases(path)


def test_not_a_list(tmp_path):
    path = _write(tmp_path / "obj.json", {"phrases": []})
    with pytest.raises(ValueError, match="expected a list"):
        load_phrases(path)


def test_not_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("[{", encoding="utf-8")
    with pytest.raises(ValueError, match="not valid JSON"):
        load_phrases(path)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_phrases(tmp_path / "missing.json")


def test_shuffle_is_seeded_copy():
    phrases = [Phrase(spoken=str(i), expected=str(i)) for i in range(10)]
    a = shuffle_phrases(phrases, seed=42)
    b = shuffle_phrases(phrases, seed=42)
    assert a == b
    assert sorted(a, key=lambda p: int(p.spoken)) == phrases
    assert phrases[0].spoken == "0"
