"""Whisper ASR transcription of a recorded attempt."""

import logging
from pathlib import Path

import whisper

logger = logging.getLogger(__name__)

_model_cache: dict[str, object] = {}


def transcribe(
    audio_path: Path,
    model_name: str = "base",
    language: str = "ja",
    audio_hash: str | None = None,
    use_cache: bool = False,
) -> dict:
    """Transcribe audio and return segment-level text.

    Args:
        audio_path: Path to the audio file.
        model_name: Whisper model size.
        language: Whisper language code ("ja", "ko", ...).
        audio_hash: Pre-computed hash of the audio file (enables caching).
        use_cache: Whether to check/store the transcription cache.

    Returns:
        Dict with keys:
            text: Full transcript (stripped)
            segments: List of dicts with 'text', 'start', 'end' keys
            language: Detected or specified language
    """
    if use_cache and audio_hash:
        from koekoi.cache import get_cached_transcription
        cached = get_cached_transcription(audio_hash, model_name, language)
        if cached is not None:
            return cached

    if model_name not in _model_cache:
        logger.info(f"Loading Whisper model: {model_name}")
        _model_cache[model_name] = whisper.load_model(model_name)
    model = _model_cache[model_name]

    result = model.transcribe(str(audio_path), language=language)

    segments = []
    for segment in result.get("segments", []):
        text = segment["text"].strip()
        if not text:
            continue
        segments.append({
            "text": text,
            "start": segment["start"],
            "end": segment["end"],
        })

    output = {
        "text": result["text"].strip(),
        "segments": segments,
        "language": result.get("language", language),
    }

    if use_cache and audio_hash:
        from koekoi.cache import store_transcription_cache
        store_transcription_cache(audio_hash, model_name, language, output)

    return output
