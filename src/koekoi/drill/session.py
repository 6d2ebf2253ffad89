"""Drill session: phrase list, current index and the one live attempt."""

import asyncio
import logging
from typing import Callable, Sequence

from koekoi.drill.attempt import Attempt, AttemptStatus, status_of
from koekoi.drill.normalize import locale_for, normalize
from koekoi.drill.recognizer import Recognizer
from koekoi.types import (
    AttemptVerdict,
    Correct,
    ErrorAutoReset,
    HypothesisEvent,
    Phrase,
    verdict_name,
)

logger = logging.getLogger(__name__)

# Pause between releasing one recognizer session and starting the next.
SETTLE_DELAY = 0.05
# How long an error stays on screen before the phrase can be retried.
ERROR_RESET_DELAY = 1.5

VerdictListener = Callable[[int, AttemptVerdict], None]


class DrillSession:
    """Drives recognition attempts over an ordered list of phrases.

    Recognizer events are queued per attempt and consumed by a single task,
    so they are processed one at a time in arrival order. Replacing or
    cancelling an attempt drops its queue; no verdict is reported for it.

    Args:
        phrases: Phrases to drill, in order.
        language: Language tag; selects the recognizer locale and folding.
        recognizer: Backend that delivers hypothesis events.
        on_verdict: Called with (phrase index, verdict) on every verdict change.
        settle_delay: Seconds to wait before starting a new recognizer session.
        reset_delay: Seconds an error is shown before returning to idle.
    """

    def __init__(
        self,
        phrases: Sequence[Phrase],
        language: str,
        recognizer: Recognizer,
        on_verdict: VerdictListener | None = None,
        settle_delay: float = SETTLE_DELAY,
        reset_delay: float = ERROR_RESET_DELAY,
    ):
        if not phrases:
            raise ValueError("A drill session needs at least one phrase")
        self.phrases = list(phrases)
        self.language = language
        self.locale = locale_for(language)
        self.recognizer = recognizer
        self.on_verdict = on_verdict
        self.settle_delay = settle_delay
        self.reset_delay = reset_delay

        self.index = 0
        self.help_visible = False
        self.closed = False

        self._attempt: Attempt | None = None
        self._pump: asyncio.Task | None = None
        self._reset: asyncio.Task | None = None
        self._settled: asyncio.Event | None = None
        self._generation = 0

    @property
    def current_phrase(self) -> Phrase:
        return self.phrases[self.index]

    @property
    def verdict(self) -> AttemptVerdict | None:
        """Verdict of the live attempt, or None when idle."""
        attempt = self._attempt
        if attempt is None or attempt.expired():
            return None
        return attempt.verdict

    @property
    def status(self) -> AttemptStatus:
        return status_of(self.verdict)

    @property
    def heard(self) -> str:
        """Latest hypothesis text of the live attempt."""
        return self._attempt.state.last_text if self._attempt is not None else ""

    async def start_attempt(self) -> bool:
        """Discard any live attempt and start listening for the current phrase.

        Returns:
            False if another start, a cancel or quit superseded this one
            during the settling delay.
        """
        if self.closed:
            raise RuntimeError("Session is closed")
        self.cancel_attempt()
        generation = self._generation

        await asyncio.sleep(self.settle_delay)
        phrase = self.current_phrase
        expected = await asyncio.to_thread(normalize, self.language, phrase.expected)
        if generation != self._generation or self.closed:
            logger.debug("Attempt superseded before it started")
            return False

        loop = asyncio.get_running_loop()
        queue: asyncio.Queue[HypothesisEvent] = asyncio.Queue()
        attempt = Attempt(
            phrase.expected,
            self.language,
            expected_norm=expected,
            reset_delay=self.reset_delay,
            clock=loop.time,
        )
        self._attempt = attempt
        self._settled = asyncio.Event()
        self._pump = loop.create_task(self._consume(attempt, queue, self.index))

        def sink(event: HypothesisEvent) -> None:
            try:
                loop.call_soon_threadsafe(queue.put_nowait, event)
            except RuntimeError:
                # Loop already closed; the attempt is gone.
                logger.debug(f"Dropped {event!r} after the event loop closed")

        logger.info(f"Listening for phrase {self.index + 1}/{len(self.phrases)}: {phrase.spoken}")
        self.recognizer.start(self.locale, sink)
        return True

    async def run_attempt(self) -> AttemptVerdict | None:
        """Start an attempt and wait for it to settle.

        Returns the terminal verdict. An errored attempt returns once the
        session is idle again. Returns None if the attempt was cancelled.
        """
        if not await self.start_attempt():
            return None
        attempt, settled = self._attempt, self._settled
        await settled.wait()
        return attempt.verdict if attempt.finished else None

    def cancel_attempt(self) -> None:
        """Discard the live attempt, if any, and release its recognizer session."""
        self._generation += 1
        attempt = self._attempt
        self._attempt = None
        for task in (self._pump, self._reset):
            if task is not None and not task.done():
                task.cancel()
        self._pump = None
        self._reset = None
        if attempt is not None:
            self.recognizer.cancel()
            logger.info(f"Attempt discarded ({verdict_name(attempt.verdict)})")
        if self._settled is not None:
            self._settled.set()

    def advance(self) -> Phrase:
        """Move to the next phrase, wrapping to the first after the last."""
        self.cancel_attempt()
        self.index = (self.index + 1) % len(self.phrases)
        self.help_visible = False
        logger.info(f"Phrase {self.index + 1}/{len(self.phrases)}: {self.current_phrase.spoken}")
        return self.current_phrase

    def toggle_help(self) -> bool:
        self.help_visible = not self.help_visible
        return self.help_visible

    def quit(self) -> None:
        self.cancel_attempt()
        self.closed = True

    def _emit(self, index: int, verdict: AttemptVerdict) -> None:
        if self.on_verdict is None:
            return
        try:
            self.on_verdict(index, verdict)
        except Exception:
            logger.exception("Verdict listener failed")

    async def _consume(self, attempt: Attempt, queue: asyncio.Queue, index: int) -> None:
        while not attempt.finished:
            event = await queue.get()
            previous = attempt.verdict
            verdict = attempt.handle(event)
            if verdict == previous:
                continue
            if isinstance(verdict, Correct):
                self.help_visible = True
            self._emit(index, verdict)

        if isinstance(attempt.verdict, ErrorAutoReset):
            self._reset = asyncio.get_running_loop().create_task(self._auto_reset(attempt))
        elif self._settled is not None:
            self._settled.set()

    async def _auto_reset(self, attempt: Attempt) -> None:
        loop = asyncio.get_running_loop()
        await asyncio.sleep(max(0.0, attempt.reset_at - loop.time()))
        if self._attempt is not attempt:
            return
        self._attempt = None
        logger.info("Error shown, ready to retry the same phrase")
        if self._settled is not None:
            self._settled.set()
