"""Convert target phrases and recognizer hypotheses to a comparable form."""

import logging
import re
from dataclasses import dataclass

from janome.tokenizer import Tokenizer

from koekoi.types import NormalizedText

logger = logging.getLogger(__name__)

# Whitespace plus the full-width marks recognizers emit for Japanese.
_STRIP_RE = re.compile(r"[\s、。？！]")

# Display name -> recognizer locale.
LANGUAGES: dict[str, str] = {
    "Japanese": "ja-JP",
    "Korean": "ko-KR",
    "Vietnamese": "vi-VN",
    "Spanish": "es-ES",
}

# Languages whose text needs morphological reading conversion.
_FOLDING_LANGUAGES = frozenset({"ja"})

_tokenizer = None


def _get_tokenizer() -> Tokenizer:
    global _tokenizer
    if _tokenizer is None:
        _tokenizer = Tokenizer()
    return _tokenizer


@dataclass
class ReadingToken:
    """One morphological token and its katakana reading, if known."""
    surface: str
    reading: str | None


def language_code(language: str) -> str:
    """Map 'Japanese', 'ja-JP' or 'ja' to 'ja'.

    Unknown tags are returned lowercased, without a region suffix.
    """
    tag = language.strip()
    for name, locale in LANGUAGES.items():
        if tag.lower() == name.lower():
            tag = locale
            break
    return re.split(r"[-_]", tag, maxsplit=1)[0].lower()


def locale_for(language: str) -> str:
    """Recognizer locale for a language tag; unknown tags pass through."""
    code = language_code(language)
    for locale in LANGUAGES.values():
        if locale.split("-")[0] == code:
            return locale
    return language


def strip_punctuation(text: str) -> str:
    return _STRIP_RE.sub("", text)


def tokenize_readings(text: str) -> list[ReadingToken]:
    """Split Japanese text into tokens with their dictionary readings."""
    tokens = []
    for token in _get_tokenizer().tokenize(text):
        reading = token.reading
        if not reading or reading == "*":
            reading = None
        tokens.append(ReadingToken(surface=token.surface, reading=reading))
    return tokens


def to_reading(text: str) -> str:
    """Concatenate token readings, using the surface where none is known.

    Falls back to ``text`` unchanged if the tokenizer fails.
    """
    try:
        tokens = tokenize_readings(text)
    except Exception:
        logger.warning(f"Tokenizer failed on {text!r}, comparing surface text", exc_info=True)
        return text
    return "".join(t.reading or t.surface for t in tokens)


def normalize(language: str, text: str | None) -> NormalizedText:
    """Strip punctuation, fold to a phonetic reading where needed, lowercase.

    Punctuation is removed before folding so it never reaches the tokenizer.
    Only Japanese is folded; other supported languages already compare on
    their written form.
    """
    stripped = strip_punctuation(text or "")
    if stripped and language_code(language) in _FOLDING_LANGUAGES:
        stripped = to_reading(stripped)
    return NormalizedText(stripped.lower())
