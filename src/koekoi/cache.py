"""File-based caching of Whisper transcriptions."""

import hashlib
import json
import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)

CACHE_DIR = Path(os.environ.get("KOEKOI_CACHE_DIR", "~/.cache/koekoi")).expanduser()


def file_hash(path: Path) -> str:
    """Compute SHA-256 hash of a file's contents."""
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()


def _atomic_write(target: Path, data: bytes) -> None:
    """Write data to target atomically via temp file + rename."""
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=target.parent, suffix=".tmp")
    closed = False
    try:
        os.write(fd, data)
        os.close(fd)
        closed = True
        os.replace(tmp, target)
    except Exception:
        if not closed:
            os.close(fd)
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise


def _transcription_cache_path(audio_hash: str, model: str, language: str) -> Path:
    return CACHE_DIR / "whisper" / f"{audio_hash}_{model}_{language}.json"


def get_cached_transcription(
    audio_hash: str, model: str, language: str
) -> dict | None:
    """Return cached transcription dict, or None if not cached."""
    path = _transcription_cache_path(audio_hash, model, language)
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError):
        return None
    if not isinstance(data, dict) or "text" not in data:
        return None
    logger.info(f"Cache hit: transcription ({audio_hash[:12]}...)")
    return data


def store_transcription_cache(
    audio_hash: str, model: str, language: str, result: dict
) -> None:
    """Store transcription result in cache."""
    path = _transcription_cache_path(audio_hash, model, language)
    _atomic_write(path, json.dumps(result, ensure_ascii=False).encode("utf-8"))
    logger.info(f"Cached transcription ({audio_hash[:12]}...)")
