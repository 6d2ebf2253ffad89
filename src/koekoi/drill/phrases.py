"""Read a user-supplied phrase list."""

import json
import logging
import random
from pathlib import Path

from koekoi.types import Phrase

logger = logging.getLogger(__name__)


def load_phrases(path: Path) -> list[Phrase]:
    """Load a JSON list of phrase objects.

    Raises:
        FileNotFoundError: if ``path`` does not exist.
        ValueError: if the document is not a list, or an entry is invalid.
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"{path}: not valid JSON ({e})") from e

    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a list of phrases, got {type(data).__name__}")

    phrases = []
    for i, entry in enumerate(data):
        try:
            phrases.append(Phrase.from_dict(entry))
        except ValueError as e:
            raise ValueError(f"{path}: phrase {i}: {e}") from e

    logger.info(f"Loaded {len(phrases)} phrases from {path}")
    return phrases


def shuffle_phrases(phrases: list[Phrase], seed: int | None = None) -> list[Phrase]:
    """Return a shuffled copy of ``phrases``."""
    shuffled = list(phrases)
    random.Random(seed).shuffle(shuffled)
    return shuffled
