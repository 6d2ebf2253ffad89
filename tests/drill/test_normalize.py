"""Tests for text normalization."""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

from koekoi.drill.normalize import (
    language_code,
    locale_for,
    normalize,
    strip_punctuation,
    tokenize_readings,
)
from koekoi.types import NormalizedText


def _mock_tokenizer(*tokens):
    tokenizer = MagicMock()
    tokenizer.tokenize.return_value = [
        SimpleNamespace(surface=s, reading=r) for s, r in tokens
    ]
    return tokenizer


class TestLanguageTags:
    def test_display_name(self):
        assert language_code("Japanese") == "ja"
        assert language_code("korean") == "ko"

    def test_locale_and_code(self):
        assert language_code("ja-JP") == "ja"
        assert language_code("JA") == "ja"
        assert language_code("pt_BR") == "pt"

    def test_locale_for(self):
        assert locale_for("Korean") == "ko-KR"
        assert locale_for("vi") == "vi-VN"
        assert locale_for("Spanish") == "es-ES"

    def test_unknown_locale_passes_through(self):
        assert locale_for("fr-FR") == "fr-FR"


class TestStrip:
    def test_strips_whitespace_and_marks(self):
        assert strip_punctuation("はい、 そうです。 本当？ すごい！") == "はいそうです本当すごい"

    def test_ascii_punctuation_kept(self):
        assert strip_punctuation("hola?") == "hola?"


class TestIdentityFold:
    def test_lowercases(self):
        assert normalize("es", "Hola Mundo") == NormalizedText("holamundo")

    def test_idempotent(self):
        for text in ["Xin chào", "¿Dónde está?", "안녕 하세요。", ""]:
            once = normalize("vi", text)
            assert normalize("vi", once.value) == once

    def test_trailing_mark_stripped_without_folding(self):
        assert normalize("ko", "こんにちは。") == NormalizedText("こんにちは")

    def test_none_is_empty(self):
        assert normalize("es", None) == NormalizedText("")

    def test_tokenizer_not_used(self):
        with patch("koekoi.drill.normalize._get_tokenizer") as get_tok:
            normalize("Spanish", "Buenos días")
        get_tok.assert_not_called()


class TestJapaneseFold:
    def test_concatenates_readings(self):
        tokenizer = _mock_tokenizer(("今日", "キョウ"), ("は", "ハ"))
        with patch("koekoi.drill.normalize._get_tokenizer", return_value=tokenizer):
            assert normalize("Japanese", "今日は。") == NormalizedText("キョウハ")
        # Punctuation is removed before tokenizing
        tokenizer.tokenize.assert_called_once_with("今日は")

    def test_unknown_reading_uses_surface(self):
        tokenizer = _mock_tokenizer(("Koekoi", "*"), ("です", "デス"))
        with patch("koekoi.drill.normalize._get_tokenizer", return_value=tokenizer):
            assert normalize("ja-JP", "Koekoiです") == NormalizedText("koekoiデス")

    def test_tokenizer_failure_falls_back(self):
        tokenizer = MagicMock()
        tokenizer.tokenize.side_effect = RuntimeError("dictionary missing")
        with patch("koekoi.drill.normalize._get_tokenizer", return_value=tokenizer):
            assert normalize("ja", "ABC、です。") == NormalizedText("abcです")

    def test_tokenize_readings(self):
        tokenizer = _mock_tokenizer(("東京", "トウキョウ"), ("ABC", ""))
        with patch("koekoi.drill.normalize._get_tokenizer", return_value=tokenizer):
            tokens = tokenize_readings("東京ABC")
        assert [(t.surface, t.reading) for t in tokens] == [
            ("東京", "トウキョウ"), ("ABC", None),
        ]

    def test_real_dictionary_reading(self):
        assert normalize("ja", "東京") == NormalizedText("トウキョウ")

    def test_kanji_and_katakana_compare_equal(self):
        assert normalize("ja", "東京。") == normalize("ja", "トウキョウ")
