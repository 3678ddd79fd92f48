from typing import Iterable, Mapping, Optional

from afinn import Afinn

from commentguard.moderation.domain.text import tokenize


class SentimentScorer:
    """
    Score de polaridade baseado no léxico AFINN: média dos pesos por token.

    Cada token do `tokenize` é pontuado isoladamente, então expressões de
    várias palavras do AFINN não contam. Não trata negação ("not good") nem
    aplica stemming; é uma limitação conhecida do modelo por léxico.
    """

    def __init__(self, lexicon: Optional[Mapping[str, int]] = None):
        self.lexicon = lexicon
        self._afinn = Afinn(language="en") if lexicon is None else None

    def weight(self, token: str) -> float:
        if self.lexicon is not None:
            return self.lexicon.get(token, 0)
        return self._afinn.score(token)

    def score(self, content: str) -> float:
        return self.score_tokens(tokenize(content))

    def score_tokens(self, tokens: Iterable[str]) -> float:
        tokens = list(tokens)
        if not tokens:
            return 0.0
        return sum(self.weight(token) for token in tokens) / len(tokens)

    @staticmethod
    def label(score: float) -> str:
        if score >= 1:
            return "positive"
        if score <= -1:
            return "negative"
        return "neutral"

    @staticmethod
    def toxicity(score: float) -> float:
        if score >= -2:
            return 0.0
        return min(max(abs(score) / 5, 0.0), 1.0)
