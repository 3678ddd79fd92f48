import re
from typing import Iterable, Optional

from commentguard.moderation.domain.config import DEFAULT_SPAM_PHRASES

PHRASE_WEIGHT = 0.15
PUNCTUATION_BURST_WEIGHT = 0.3
PHONE_WEIGHT = 0.4
EMAIL_WEIGHT = 0.3

PUNCTUATION_BURST_COUNT = 5
PUNCTUATION_BURST_DENSITY = 0.1

_PHONE = re.compile(r"\b\d{3}[-.\s]?\d{3}[-.\s]?\d{4}\b")
_EMAIL = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
_BURST_CHARS = frozenset("!?")


class SpamScorer:
    """
    Probabilidade de spam por soma de contribuições independentes.

    Cada contribuição é rastreável via `explain`, o que mantém a decisão
    auditável; o total é limitado a [0, 1].
    """

    def __init__(self, phrases: Optional[Iterable[str]] = None):
        self.phrases = tuple(p.lower() for p in (DEFAULT_SPAM_PHRASES if phrases is None else phrases))

    def explain(self, content: str) -> dict[str, float]:
        contributions: dict[str, float] = {}
        lowered = content.lower()

        for phrase in self.phrases:
            if phrase in lowered:
                contributions[f"phrase:{phrase}"] = PHRASE_WEIGHT

        if self._has_punctuation_burst(content):
            contributions["punctuation_burst"] = PUNCTUATION_BURST_WEIGHT
        if _PHONE.search(content):
            contributions["phone_number"] = PHONE_WEIGHT
        if _EMAIL.search(content):
            contributions["email_address"] = EMAIL_WEIGHT

        return contributions

    def score(self, content: str) -> float:
        return min(max(sum(self.explain(content).values()), 0.0), 1.0)

    @staticmethod
    def _has_punctuation_burst(content: str) -> bool:
        if not content:
            return False
        count = sum(1 for char in content if char in _BURST_CHARS)
        return count > PUNCTUATION_BURST_COUNT or count / len(content) > PUNCTUATION_BURST_DENSITY
