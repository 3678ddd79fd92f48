import re

_TOKEN_SPLIT = re.compile(r"[^\w]+")


def tokenize(content: str) -> list[str]:
    """Quebra o texto em tokens minúsculos, separando por espaços e pontuação."""
    return [token for token in _TOKEN_SPLIT.split(content.lower()) if token]


def is_single_token(word: str) -> bool:
    """Indica se a palavra sobrevive inteira ao `tokenize` (sem hífen, apóstrofo ou espaço)."""
    return tokenize(word) == [word.strip().lower()]
