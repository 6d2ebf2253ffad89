"""Classify a normalized hypothesis against the normalized expected phrase."""

from koekoi.types import MatchKind, NormalizedText


def classify(expected: NormalizedText, hypothesis: NormalizedText) -> MatchKind:
    """Strict left-to-right comparison, no fuzzy matching.

    Returns:
        EMPTY if the hypothesis is empty, EXACT if it equals the expected
        text, PREFIX if the expected text starts with it, else DIVERGENT.
    """
    if not isinstance(expected, NormalizedText) or not isinstance(hypothesis, NormalizedText):
        raise TypeError("classify() compares NormalizedText values only")

    if not hypothesis.value:
        return MatchKind.EMPTY
    if hypothesis == expected:
        return MatchKind.EXACT
    if expected.value.startswith(hypothesis.value):
        return MatchKind.PREFIX
    return MatchKind.DIVERGENT
