"""Speech recognizer interface and backends."""

import logging
import threading
from abc import ABC, abstractmethod
from collections import deque
from pathlib import Path
from typing import Callable, Iterable

from koekoi.drill.normalize import language_code
from koekoi.drill.transcribe import transcribe
from koekoi.types import (
    Final,
    HypothesisEvent,
    Partial,
    RecognizerError,
    RecognizerErrorKind,
    SpeechEnded,
)

logger = logging.getLogger(__name__)

EventSink = Callable[[HypothesisEvent], None]


class Recognizer(ABC):
    """Abstract base for speech recognition backends.

    A backend delivers events for one recognition session at a time, in
    order, into the sink given to :meth:`start`. The sink may be called from
    any thread.
    """

    name: str = "base"

    @abstractmethod
    def start(self, language: str, sink: EventSink) -> None:
        """Begin a recognition session.

        Args:
            language: Recognizer locale, e.g. "ja-JP".
            sink: Receives Partial/Final events, then SpeechEnded or
                RecognizerError.
        """

    @abstractmethod
    def cancel(self) -> None:
        """Stop the current session; no further events are delivered."""


class ScriptedRecognizer(Recognizer):
    """Replays prepared event sequences, one per session."""

    name = "scripted"

    def __init__(self, scripts: Iterable[Iterable[HypothesisEvent]] = (), **kwargs):
        self._scripts = deque(list(s) for s in scripts)
        self.cancelled = 0

    def add_script(self, events: Iterable[HypothesisEvent]) -> None:
        self._scripts.append(list(events))

    def start(self, language: str, sink: EventSink) -> None:
        if not self._scripts:
            sink(RecognizerError(RecognizerErrorKind.CLIENT, "No scripted attempt left"))
            return
        for event in self._scripts.popleft():
            sink(event)

    def cancel(self) -> None:
        self.cancelled += 1


def _join_segments(parts: list[str], language: str) -> str:
    separator = "" if language_code(language) in ("ja", "zh") else " "
    return separator.join(parts)


class WhisperRecognizer(Recognizer):
    """Transcribes recorded attempts with Whisper.

    Each session consumes the next recording. Segments are replayed as
    growing Partial hypotheses, followed by the Final transcript and
    SpeechEnded. Transcription runs on a background thread.
    """

    name = "whisper"

    def __init__(
        self,
        recordings: Iterable[Path | str] = (),
        whisper_model: str = "base",
        use_cache: bool = True,
        **kwargs,
    ):
        self._recordings = deque(Path(p) for p in recordings)
        self.whisper_model = whisper_model
        self.use_cache = use_cache
        self._cancelled: threading.Event | None = None
        self._thread: threading.Thread | None = None

    def add_recording(self, path: Path | str) -> None:
        self._recordings.append(Path(path))

    def start(self, language: str, sink: EventSink) -> None:
        self.cancel()
        cancelled = threading.Event()
        self._cancelled = cancelled
        recording = self._recordings.popleft() if self._recordings else None
        self._thread = threading.Thread(
            target=self._run,
            args=(recording, language, sink, cancelled),
            daemon=True,
        )
        self._thread.start()

    def cancel(self) -> None:
        if self._cancelled is not None:
            self._cancelled.set()

    def join(self, timeout: float | None = None) -> None:
        """Wait for the current session's thread to finish."""
        if self._thread is not None:
            self._thread.join(timeout)

    def _run(
        self,
        recording: Path | None,
        language: str,
        sink: EventSink,
        cancelled: threading.Event,
    ) -> None:
        for event in self.events_for(recording, language):
            if cancelled.is_set():
                logger.debug(f"Session for {recording} cancelled")
                return
            sink(event)

    def events_for(self, recording: Path | None, language: str) -> list[HypothesisEvent]:
        """Transcribe one recording and return its event sequence."""
        if recording is None:
            return [RecognizerError(RecognizerErrorKind.CLIENT, "No recording available")]
        if not recording.exists():
            logger.error(f"Recording not found: {recording}")
            return [RecognizerError(RecognizerErrorKind.AUDIO)]

        try:
            audio_hash = None
            if self.use_cache:
                from koekoi.cache import file_hash
                audio_hash = file_hash(recording)
            result = transcribe(
                recording,
                model_name=self.whisper_model,
                language=language_code(language),
                audio_hash=audio_hash,
                use_cache=self.use_cache,
            )
        except Exception as e:
            logger.exception(f"Transcription failed for {recording}")
            return [RecognizerError(RecognizerErrorKind.CLIENT, f"Transcription error: {e}")]

        text = result["text"]
        if not text:
            return [RecognizerError(RecognizerErrorKind.NO_MATCH)]

        events: list[HypothesisEvent] = []
        heard: list[str] = []
        for segment in result.get("segments", []):
            heard.append(segment["text"])
            events.append(Partial(_join_segments(heard, language)))
        events.append(Final(text))
        events.append(SpeechEnded())
        return events


_RECOGNIZERS = {
    "scripted": ScriptedRecognizer,
    "whisper": WhisperRecognizer,
}


def get_recognizer(name: str, **kwargs) -> Recognizer:
    """Get a recognizer backend by name ("scripted" or "whisper")."""
    if name not in _RECOGNIZERS:
        raise ValueError(
            f"Unknown recognizer: {name!r}. Available: {list(_RECOGNIZERS.keys())}"
        )
    return _RECOGNIZERS[name](**kwargs)
