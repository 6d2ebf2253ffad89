"""Core data types for koekoi."""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class Phrase:
    """A drill phrase. Equality is structural over all five fields."""
    spoken: str         # display form
    expected: str       # what the recognizer output must match
    reading: str = ""   # phonetic hint, display only
    english: str = ""
    grammar: str = ""

    def to_dict(self) -> dict:
        return {
            "spoken": self.spoken,
            "expected": self.expected,
            "reading": self.reading,
            "english": self.english,
            "grammar": self.grammar,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Phrase":
        """Build a Phrase from a JSON object, checking every field.

        Raises:
            ValueError: if ``data`` is not an object, a required field is
                missing, or a field is not a string.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Phrase must be an object, got {type(data).__name__}")
        fields = {}
        for name in ("spoken", "expected", "reading", "english", "grammar"):
            if name not in data:
                if name in ("spoken", "expected"):
                    raise ValueError(f"Phrase is missing required field {name!r}")
                fields[name] = ""
                continue
            value = data[name]
            if not isinstance(value, str):
                raise ValueError(
                    f"Phrase field {name!r} must be a string, got {type(value).__name__}"
                )
            fields[name] = value
        return cls(**fields)


@dataclass(frozen=True)
class NormalizedText:
    """Text that has been through the normalizer.

    Never equal to a plain ``str``; compare two NormalizedText values.
    """
    value: str

    def __str__(self) -> str:
        return self.value

    def __len__(self) -> int:
        return len(self.value)


class MatchKind(Enum):
    """How a hypothesis relates to the expected phrase."""
    EMPTY = "empty"
    PREFIX = "prefix"
    EXACT = "exact"
    DIVERGENT = "divergent"


# --- Recognizer events ---


class RecognizerErrorKind(Enum):
    AUDIO = "audio"
    CLIENT = "client"
    INSUFFICIENT_PERMISSIONS = "insufficient_permissions"
    NETWORK = "network"
    NETWORK_TIMEOUT = "network_timeout"
    NO_MATCH = "no_match"
    RECOGNIZER_BUSY = "recognizer_busy"
    SERVER = "server"
    SPEECH_TIMEOUT = "speech_timeout"
    UNKNOWN = "unknown"


ERROR_DESCRIPTIONS: dict[RecognizerErrorKind, str] = {
    RecognizerErrorKind.AUDIO: "Audio recording error",
    RecognizerErrorKind.CLIENT: "Client side error",
    RecognizerErrorKind.INSUFFICIENT_PERMISSIONS: "Insufficient permissions",
    RecognizerErrorKind.NETWORK: "Network error",
    RecognizerErrorKind.NETWORK_TIMEOUT: "Network timeout",
    RecognizerErrorKind.NO_MATCH: "No match found. Try again.",
    RecognizerErrorKind.RECOGNIZER_BUSY: "RecognitionService busy",
    RecognizerErrorKind.SERVER: "Server error",
    RecognizerErrorKind.SPEECH_TIMEOUT: "No speech input. Speak louder.",
    RecognizerErrorKind.UNKNOWN: "Unknown error",
}


@dataclass(frozen=True)
class Partial:
    """A hypothesis the recognizer may still revise."""
    text: str


@dataclass(frozen=True)
class Final:
    """The recognizer's settled hypothesis for the utterance."""
    text: str


@dataclass(frozen=True)
class SpeechEnded:
    """The learner stopped speaking; closes the recognition session."""


@dataclass(frozen=True)
class RecognizerError:
    """Transport or platform failure; closes the recognition session."""
    kind: RecognizerErrorKind
    detail: str | None = None

    @property
    def message(self) -> str:
        return self.detail or ERROR_DESCRIPTIONS[self.kind]


HypothesisEvent = Partial | Final | SpeechEnded | RecognizerError


# --- Verdicts ---


@dataclass(frozen=True)
class Listening:
    last_text: str = ""


@dataclass(frozen=True)
class Correct:
    pass


@dataclass(frozen=True)
class Incorrect:
    pass


@dataclass(frozen=True)
class ErrorAutoReset:
    message: str


AttemptVerdict = Listening | Correct | Incorrect | ErrorAutoReset


def verdict_name(verdict: AttemptVerdict | None) -> str:
    """Short label for logs and reports."""
    if verdict is None:
        return "idle"
    return {
        Listening: "listening",
        Correct: "correct",
        Incorrect: "incorrect",
        ErrorAutoReset: "error",
    }[type(verdict)]
