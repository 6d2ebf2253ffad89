"""Attempt state machine: turns recognizer events into a verdict."""

import logging
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable

from koekoi.drill.matcher import classify
from koekoi.drill.normalize import normalize
from koekoi.types import (
    AttemptVerdict,
    Correct,
    ErrorAutoReset,
    Final,
    HypothesisEvent,
    Incorrect,
    Listening,
    MatchKind,
    NormalizedText,
    Partial,
    RecognizerError,
    SpeechEnded,
    verdict_name,
)

logger = logging.getLogger(__name__)

# Texts the recognizer adapter reports in place of a hypothesis.
ERROR_SENTINELS = frozenset({
    "No match found. Try again.",
    "No speech input. Speak louder.",
})


class AttemptStatus(Enum):
    IDLE = "idle"
    LISTENING = "listening"
    CORRECT = "correct"
    INCORRECT = "incorrect"
    ERROR = "error"


_STATUS_BY_VERDICT = {
    Listening: AttemptStatus.LISTENING,
    Correct: AttemptStatus.CORRECT,
    Incorrect: AttemptStatus.INCORRECT,
    ErrorAutoReset: AttemptStatus.ERROR,
}


def status_of(verdict: AttemptVerdict | None) -> AttemptStatus:
    if verdict is None:
        return AttemptStatus.IDLE
    return _STATUS_BY_VERDICT[type(verdict)]


def is_error_text(text: str) -> bool:
    """True for hypothesis text that is really a recognizer error report."""
    return "error" in text.lower() or text in ERROR_SENTINELS


@dataclass(frozen=True)
class AttemptState:
    """Snapshot of one attempt."""
    verdict: AttemptVerdict = Listening()
    last_text: str = ""
    speech_ended: bool = False

    @property
    def finished(self) -> bool:
        return not isinstance(self.verdict, Listening)


def _decide(kind: MatchKind) -> AttemptVerdict:
    return Correct() if kind is MatchKind.EXACT else Incorrect()


def step(
    state: AttemptState,
    event: HypothesisEvent,
    expected: NormalizedText,
    fold: Callable[[str], NormalizedText],
) -> AttemptState:
    """Apply one event to an attempt and return the new snapshot.

    Args:
        state: Current snapshot.
        event: Next recognizer event, in arrival order.
        expected: Normalized expected phrase.
        fold: Normalizer for hypothesis text.

    An exact match wins as soon as it is heard. A mismatch is only final once
    speech has ended, since recognizers revise earlier partial guesses.
    """
    if state.finished:
        return state

    if isinstance(event, RecognizerError):
        return replace(state, verdict=ErrorAutoReset(event.message))

    if isinstance(event, SpeechEnded):
        ended = replace(state, speech_ended=True)
        if not state.last_text:
            # Nothing heard yet; the final result may still follow.
            return ended
        kind = classify(expected, fold(state.last_text))
        return replace(ended, verdict=_decide(kind))

    text = event.text
    if is_error_text(text):
        return replace(state, verdict=ErrorAutoReset(text))

    kind = classify(expected, fold(text))
    logger.debug(f"{type(event).__name__}({text!r}) -> {kind.value}")
    if kind is MatchKind.EXACT:
        return replace(state, last_text=text, verdict=Correct())
    # An empty hypothesis never displaces what was already heard.
    heard = text or state.last_text
    if state.speech_ended:
        return replace(state, last_text=heard, verdict=Incorrect())
    return replace(state, last_text=heard, verdict=Listening(heard))


class Attempt:
    """One live recognition attempt for one phrase.

    Owns the expected text and the current snapshot. State changes only
    through :meth:`handle`.
    """

    def __init__(
        self,
        expected: str,
        language: str,
        expected_norm: NormalizedText | None = None,
        reset_delay: float = 1.5,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.language = language
        self.expected = expected_norm if expected_norm is not None else normalize(language, expected)
        self.reset_delay = reset_delay
        self._clock = clock
        self.state = AttemptState()
        self.reset_at: float | None = None
        if not self.expected.value:
            logger.warning(f"Expected phrase {expected!r} is empty after normalization")

    @property
    def verdict(self) -> AttemptVerdict:
        return self.state.verdict

    @property
    def status(self) -> AttemptStatus:
        return status_of(self.state.verdict)

    @property
    def finished(self) -> bool:
        return self.state.finished

    def _fold(self, text: str) -> NormalizedText:
        return normalize(self.language, text)

    def handle(self, event: HypothesisEvent) -> AttemptVerdict:
        """Process one event and return the resulting verdict.

        Failures inside processing end the attempt with ErrorAutoReset
        instead of propagating.
        """
        before = self.state
        try:
            self.state = step(self.state, event, self.expected, self._fold)
        except Exception as e:
            logger.exception(f"Failed to process {event!r}")
            self.state = replace(before, verdict=ErrorAutoReset(str(e)))

        if isinstance(self.state.verdict, ErrorAutoReset) and self.reset_at is None:
            self.reset_at = self._clock() + self.reset_delay
        if self.state.verdict != before.verdict and self.finished:
            logger.info(
                f"Attempt finished: {verdict_name(self.state.verdict)} "
                f"(heard {self.state.last_text!r})"
            )
        return self.state.verdict

    def expired(self, now: float | None = None) -> bool:
        """True once an errored attempt's display window has elapsed."""
        if self.reset_at is None:
            return False
        if now is None:
            now = self._clock()
        return now >= self.reset_at
