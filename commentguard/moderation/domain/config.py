from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional

DEFAULT_SPAM_PHRASES: tuple[str, ...] = (
    "click here",
    "buy now",
    "limited offer",
    "act now",
    "make money",
    "work from home",
    "congratulations you won",
    "increase your",
    "free gift",
    "risk free",
)

DEFAULT_LINK_TLDS: tuple[str, ...] = ("com", "org", "net", "io")


@dataclass(frozen=True)
class ModerationConfig:
    """
    Limiares e constantes do motor de moderação.

    Todos os valores vêm de `settings.MODERATION`; chaves ausentes usam
    os padrões abaixo.
    """

    spam_threshold: float = 0.7
    sentiment_threshold: float = -3.0
    caps_ratio_threshold: float = 0.8
    caps_min_length: int = 10
    min_trust_score: float = 0.1
    max_trust_score: float = 1.0
    default_trust_score: float = 0.5
    trust_override_min_score: float = 0.8
    trust_override_max_confidence: float = 0.7
    max_links_allowed: int = 3
    link_budget_mode: bool = False
    link_tlds: tuple[str, ...] = DEFAULT_LINK_TLDS
    min_comment_length: int = 1
    max_comment_length: int = 5000
    blocked_words_refresh_seconds: float = 60.0
    auto_refresh_blocked_words: bool = True
    duplicate_window_minutes: int = 15
    blocked_word_reject_weight: int = 5
    spam_phrases: tuple[str, ...] = DEFAULT_SPAM_PHRASES

    # Confianças atribuídas a cada regra.
    code_confidence: float = 1.0
    link_confidence: float = 0.9
    duplicate_confidence: float = 1.0
    blocked_word_confidence: float = 0.9
    caps_confidence: float = 0.8
    repetition_confidence: float = 0.85

    @classmethod
    def from_mapping(cls, values: Optional[Mapping[str, Any]]) -> "ModerationConfig":
        """
        Constrói a configuração a partir de um dicionário com chaves em
        maiúsculas (formato de `settings.MODERATION`).
        """
        values = values or {}
        kwargs = {}
        for f in fields(cls):
            key = f.name.upper()
            if key not in values or values[key] is None:
                continue
            raw = values[key]
            default = f.default
            if isinstance(default, bool):
                kwargs[f.name] = _to_bool(raw)
            elif isinstance(default, tuple):
                kwargs[f.name] = _to_phrases(raw)
            elif isinstance(default, int):
                kwargs[f.name] = int(raw)
            else:
                kwargs[f.name] = float(raw)
        return cls(**kwargs)

    @classmethod
    def from_settings(cls) -> "ModerationConfig":
        from django.conf import settings

        return cls.from_mapping(getattr(settings, "MODERATION", None))


def _to_bool(raw: Any) -> bool:
    if isinstance(raw, str):
        return raw.strip().lower() in {"1", "true", "yes", "on"}
    return bool(raw)


def _to_phrases(raw: Any) -> tuple[str, ...]:
    if isinstance(raw, str):
        raw = raw.split(",")
    return tuple(phrase.strip().lower() for phrase in raw if phrase.strip())
