"""
Heurísticas de formato aplicadas ao texto bruto do comentário.

Todas as funções são puras. A detecção de código e links é uma lista de
padrões negados (pré-filtro), não um parser: prefere bloquear demais a
deixar passar, já que os comentários esperados são texto simples/Markdown.
"""

import re
from functools import lru_cache
from typing import Iterable

from commentguard.moderation.domain.config import DEFAULT_LINK_TLDS

_REPETITION = re.compile(r"(.)\1{4,}")

_CODE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"<[^>]+>"),
    re.compile(r"&[#a-zA-Z0-9]+;"),
    re.compile(r"javascript\s*:", re.IGNORECASE),
    re.compile(r"vbscript\s*:", re.IGNORECASE),
    re.compile(r"on\w+\s*=", re.IGNORECASE),
    re.compile(r"style\s*=", re.IGNORECASE),
    re.compile(r"expression\s*\(", re.IGNORECASE),
    re.compile(r"@import", re.IGNORECASE),
    re.compile(r"data:[^,]*script[^,]*,", re.IGNORECASE),
    re.compile(r"base64[^'\"]*script", re.IGNORECASE),
)

# Embeds permitidos, removidos antes da busca por links.
_EMBED_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"!video\[.*?\]\(.*?\)"),
    re.compile(r"!\[.*?\]\(.*?\)"),
    re.compile(r"<img[^>]+>", re.IGNORECASE),
    re.compile(r"<video[^>]*>[\s\S]*?</video>", re.IGNORECASE),
    re.compile(r"<iframe[^>]*>[\s\S]*?</iframe>", re.IGNORECASE),
)

_URL_OR_WWW = re.compile(r"https?://\S+|www\.\S+", re.IGNORECASE)

_RAW_URL = re.compile(r"https?://\S+", re.IGNORECASE)


@lru_cache(maxsize=8)
def _bare_domain_pattern(tlds: tuple[str, ...]) -> re.Pattern[str]:
    # O rótulo antes do ponto precisa ter uma letra e começar em fronteira de palavra,
    # então reticências e pontuação colada ("agree.It") não viram domínio.
    alternatives = "|".join(re.escape(tld.lstrip(".")) for tld in tlds)
    return re.compile(rf"\b[a-z0-9-]*[a-z][a-z0-9-]*\.(?:{alternatives})\b", re.IGNORECASE)


class FormatAnalyzer:
    @staticmethod
    def caps_ratio(content: str) -> float:
        """Fração de letras maiúsculas entre as letras do texto (0 se não houver letras)."""
        letters = [char for char in content if char.isalpha()]
        if not letters:
            return 0.0
        upper = sum(1 for char in letters if char.isupper())
        return upper / len(letters)

    @staticmethod
    def has_excessive_repetition(content: str) -> bool:
        return bool(_REPETITION.search(content))

    @staticmethod
    def contains_embedded_code(content: str) -> bool:
        return any(pattern.search(content) for pattern in _CODE_PATTERNS)

    @staticmethod
    def strip_embeds(content: str) -> str:
        for pattern in _EMBED_PATTERNS:
            content = pattern.sub("", content)
        return content

    @staticmethod
    def contains_disallowed_link(content: str, tlds: Iterable[str] = DEFAULT_LINK_TLDS) -> bool:
        """
        Verifica se há links fora dos embeds reconhecidos.

        Os embeds (`![alt](url)`, `!video[alt](url)`, `<img>`, `<video>`,
        `<iframe>`) são removidos de uma cópia do texto antes da busca,
        senão a própria sintaxe do embed seria tratada como link.
        """
        remainder = FormatAnalyzer.strip_embeds(content)
        if _URL_OR_WWW.search(remainder):
            return True
        tlds = tuple(tlds)
        return bool(tlds) and bool(_bare_domain_pattern(tlds).search(remainder))

    @staticmethod
    def count_links(content: str) -> int:
        return len(_RAW_URL.findall(content))
