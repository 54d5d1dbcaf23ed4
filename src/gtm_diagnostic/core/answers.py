"""Answer set normalization and lookup.

Questionnaire answers arrive keyed by the full question text, typed or pasted
by whatever form sits upstream. Keys and values are compared after
normalize_text so that casing, surrounding whitespace and trailing
punctuation do not decide whether a rule fires.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Optional

TRAILING_PUNCTUATION = ".,;:!?"


def normalize_text(value: object) -> str:
    """Trim, lower-case and strip trailing punctuation. Non-strings normalize to ""."""
    if not isinstance(value, str):
        return ""
    return value.strip().lower().rstrip(TRAILING_PUNCTUATION + " \t\r\n")


def raw_answers(answers: object) -> dict[str, Optional[str]]:
    """Copy every string-keyed entry, in order. Non-string values are stringified, None stays None."""
    if not isinstance(answers, Mapping):
        return {}
    return {
        k: v if v is None or isinstance(v, str) else str(v)
        for k, v in answers.items()
        if isinstance(k, str)
    }


class AnswerLookup:
    """Resolves rule question keys against an answer set.

    A direct key match wins. Otherwise the question is matched on its
    normalized form; when several stored keys normalize identically the first
    one in mapping order is used.
    """

    def __init__(self, answers: object):
        self._answers: Mapping = answers if isinstance(answers, Mapping) else {}
        self._normalized: dict[str, object] = {}
        for key, value in self._answers.items():
            if not isinstance(key, str):
                continue
            self._normalized.setdefault(normalize_text(key), value)

    def get(self, question: str) -> Optional[str]:
        """Raw answer for a question, or None if absent or not a string."""
        if question in self._answers:
            value = self._answers[question]
        else:
            value = self._normalized.get(normalize_text(question))
        return value if isinstance(value, str) else None

    def matches(self, question: str, expected: str) -> bool:
        """True when the answer to question equals expected after normalization."""
        value = self.get(question)
        if value is None:
            return False
        return normalize_text(value) == normalize_text(expected)
