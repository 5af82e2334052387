# dk_search/models/query.py

"""Per-request query models: the user query and its expansions."""

from dataclasses import dataclass, field
from enum import Enum


class Language(str, Enum):
    """Script mix of a piece of text."""

    PERSIAN = "persian"
    ENGLISH = "english"
    MIXED = "mixed"
    UNKNOWN = "unknown"


class StrategyTag(str, Enum):
    """Position of a candidate term in the expansion order."""

    PRIMARY = "primary"
    ALTERNATIVE = "alternative"
    FALLBACK = "fallback"


STRATEGY_ORDER: tuple[StrategyTag, ...] = (
    StrategyTag.PRIMARY,
    StrategyTag.ALTERNATIVE,
    StrategyTag.FALLBACK,
)


@dataclass(frozen=True)
class Query:
    """An incoming free-text shopping query."""

    text: str
    language: Language = Language.UNKNOWN
    override_term: str | None = None


@dataclass(frozen=True)
class CandidateTerm:
    """One search string produced by the query expander."""

    text: str
    strategy_tag: StrategyTag = StrategyTag.PRIMARY


@dataclass(frozen=True)
class CategoryMatch:
    """A category keyword found in a query and the group it belongs to."""

    keyword: str
    group: str


@dataclass(frozen=True)
class Classification:
    """Everything the text classifier learned about a query."""

    language: Language
    intents: frozenset[str] = field(default_factory=frozenset)
    brands: tuple[str, ...] = ()
    categories: tuple[CategoryMatch, ...] = ()
    features: tuple[str, ...] = ()
    urgency: str = "normal"
    technical_level: str = "general"
    budget_preference: str = "flexible"
    usage_contexts: tuple[str, ...] = ()
    category_hints: tuple[str, ...] = ()
