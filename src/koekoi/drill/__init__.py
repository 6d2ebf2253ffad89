"""Drill pipeline: run recorded attempts through a drill session."""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from koekoi.types import (
    AttemptVerdict,
    Correct,
    ErrorAutoReset,
    Incorrect,
    Phrase,
    verdict_name,
)

logger = logging.getLogger(__name__)


@dataclass
class AttemptOutcome:
    """What happened to one recorded attempt."""
    index: int              # phrase index at the time of the attempt
    phrase: Phrase
    recording: Path
    verdict: AttemptVerdict | None
    heard: str

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "expected": self.phrase.expected,
            "spoken": self.phrase.spoken,
            "recording": str(self.recording),
            "verdict": verdict_name(self.verdict),
            "heard": self.heard,
        }


@dataclass
class DrillReport:
    language: str
    outcomes: list[AttemptOutcome] = field(default_factory=list)

    def count(self, kind: type) -> int:
        return sum(1 for o in self.outcomes if isinstance(o.verdict, kind))

    def to_dict(self) -> dict:
        return {
            "language": self.language,
            "attempts": [o.to_dict() for o in self.outcomes],
            "correct": self.count(Correct),
            "incorrect": self.count(Incorrect),
            "errors": self.count(ErrorAutoReset),
        }


async def _drill(session, recordings: list[Path], report: DrillReport) -> None:
    for recording in recordings:
        index, phrase = session.index, session.current_phrase
        verdict = await session.run_attempt()
        if isinstance(verdict, ErrorAutoReset):
            heard = verdict.message
        else:
            heard = session.heard
        report.outcomes.append(AttemptOutcome(
            index=index,
            phrase=phrase,
            recording=recording,
            verdict=verdict,
            heard=heard,
        ))
        if isinstance(verdict, (Correct, Incorrect)):
            session.advance()
    session.quit()


def run_drill(
    phrases_path: Path,
    recordings: list[Path],
    language: str = "Japanese",
    whisper_model: str = "base",
    shuffle: bool = False,
    seed: int | None = None,
    settle_delay_ms: float = 50,
    reset_delay_ms: float = 1500,
    output: Path | None = None,
    use_cache: bool = True,
) -> DrillReport:
    """Run each recording as one attempt against the current phrase.

    A correct or incorrect attempt moves on to the next phrase; an attempt
    that ends in a recognizer error is retried on the same phrase with the
    next recording.

    Args:
        phrases_path: JSON list of phrases.
        recordings: Audio files, one per attempt, in order.
        language: Language tag ("Japanese", "ko-KR", "es", ...).
        whisper_model: Whisper model size.
        shuffle: Shuffle the phrase order.
        seed: RNG seed for the shuffle.
        settle_delay_ms: Pause before each recognizer session.
        reset_delay_ms: How long an error is held before retrying.
        output: Optional path for a JSON report.
        use_cache: Use the transcription cache.
    """
    from koekoi.drill.phrases import load_phrases, shuffle_phrases
    from koekoi.drill.recognizer import get_recognizer
    from koekoi.drill.session import DrillSession

    phrases = load_phrases(phrases_path)
    if shuffle:
        phrases = shuffle_phrases(phrases, seed)

    recognizer = get_recognizer(
        "whisper",
        recordings=recordings,
        whisper_model=whisper_model,
        use_cache=use_cache,
    )
    session = DrillSession(
        phrases,
        language,
        recognizer,
        settle_delay=settle_delay_ms / 1000.0,
        reset_delay=reset_delay_ms / 1000.0,
    )

    report = DrillReport(language=language)
    asyncio.run(_drill(session, list(recordings), report))

    if output is not None:
        output = Path(output)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(
            json.dumps(report.to_dict(), indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
        logger.info(f"Report: {output}")

    return report
