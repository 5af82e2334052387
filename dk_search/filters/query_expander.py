# dk_search/filters/query_expander.py

"""Expand one user query into ranked candidate search terms.

Two strategies exist. The AI strategy asks the completion collaborator
for three optimised terms; the rule-based strategy derives them from
brand and category mentions. The AI strategy is only used when a client
was supplied, and any failure of it falls back to the rules.
"""

import json
import logging
import re

from dk_search.config.lookups import STOPWORDS
from dk_search.config.settings import Settings
from dk_search.exceptions import CompletionError
from dk_search.filters.text_classifier import TextClassifier, normalize_text
from dk_search.llm.completion_client import CompletionClient
from dk_search.llm.prompts import (
    SEARCH_SYSTEM_PROMPT,
    build_search_optimization_prompt,
)
from dk_search.models.query import (
    STRATEGY_ORDER,
    CandidateTerm,
    Classification,
    Query,
)

logger = logging.getLogger("dk_search.expander")

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)
_TOKEN_STRIP = " \t\n.,;:!?()[]{}\"'«»؟،؛-_/\\"

_AI_KEYS: tuple[str, ...] = ("primary", "alternative", "fallback")
_MAX_MEANINGFUL_TOKENS = 3


class QueryExpander:
    """Turn a :class:`Query` into 1-3 :class:`CandidateTerm` objects."""

    def __init__(self, client: CompletionClient | None = None) -> None:
        self._client = client
        self.uses_ai = client is not None

    def expand(self, query: Query) -> list[CandidateTerm]:
        """Return the ordered candidate terms for *query*, never empty."""
        if query.override_term:
            logger.debug("Using override term '%s'", query.override_term)
            return self.tag_terms([query.override_term])

        classification = TextClassifier.classify(query.text)

        terms: list[str] = []
        if self._client is not None:
            terms = self._ai_terms(
                self._client, query.text, classification
            )
        if not terms:
            terms = self.rule_based_terms(query.text, classification)

        candidates = self.tag_terms(terms)
        logger.info(
            "Expanded '%s' into %s",
            query.text,
            [c.text for c in candidates],
        )
        return candidates

    # ── AI strategy ──────────────────────────────────────

    @staticmethod
    def _ai_terms(
        client: CompletionClient,
        text: str,
        classification: Classification,
    ) -> list[str]:
        """Ask the collaborator for terms; empty list on any failure."""
        prompt = build_search_optimization_prompt(text, classification)
        try:
            reply = client.complete(
                prompt,
                system=SEARCH_SYSTEM_PROMPT,
                max_tokens=Settings.LLM_MAX_TOKENS,
                temperature=Settings.LLM_TEMPERATURE,
            )
        except CompletionError as exc:
            logger.warning(
                "AI expansion unavailable, using rules: %s", exc
            )
            return []
        except Exception as exc:
            logger.error(
                "AI expansion failed unexpectedly, using rules: %s",
                exc,
                exc_info=True,
            )
            return []

        payload = QueryExpander.parse_reply(reply)
        if payload is None:
            logger.warning("AI expansion reply was not usable JSON")
            return []

        # Lists, objects and nulls do not fit the reply schema
        terms = [
            value.strip()
            for value in (payload.get(key) for key in _AI_KEYS)
            if isinstance(value, str) and value.strip()
        ]
        if not terms:
            logger.warning("AI expansion reply held no search terms")
            return []

        logger.debug(
            "AI expansion reasoning: %s", payload.get("reasoning", "")
        )
        return terms

    @staticmethod
    def parse_reply(reply: str) -> dict[str, object] | None:
        """Parse the first JSON object in *reply*.

        Markdown code fences around the object are tolerated.
        """
        if not isinstance(reply, str) or not reply:
            return None
        cleaned = _FENCE_RE.sub("", reply)
        start = cleaned.find("{")
        if start < 0:
            return None
        try:
            payload, _ = json.JSONDecoder().raw_decode(cleaned[start:])
        except json.JSONDecodeError:
            return None
        if not isinstance(payload, dict):
            return None
        return payload

    # ── Rule-based strategy ──────────────────────────────

    @staticmethod
    def rule_based_terms(
        text: str,
        classification: Classification | None = None,
    ) -> list[str]:
        """Derive search terms from brands, categories or plain tokens."""
        if classification is None:
            classification = TextClassifier.classify(text)

        brands = list(classification.brands)
        categories = [c.keyword for c in classification.categories]

        if brands and categories:
            return [
                f"{category} {brand}"
                for category in categories
                for brand in brands
            ]
        if categories:
            return categories
        if brands:
            return brands

        tokens = QueryExpander.meaningful_tokens(text)
        if tokens:
            return [" ".join(tokens[:_MAX_MEANINGFUL_TOKENS])]
        return [Settings.GENERIC_FALLBACK_TERM]

    @staticmethod
    def meaningful_tokens(text: str) -> list[str]:
        """Tokens longer than two characters that are not stopwords."""
        tokens: list[str] = []
        for raw in normalize_text(text).split():
            token = raw.strip(_TOKEN_STRIP)
            if len(token) > 2 and token not in STOPWORDS:
                tokens.append(token)
        return tokens

    # ── Helpers ──────────────────────────────────────────

    @staticmethod
    def tag_terms(terms: list[str]) -> list[CandidateTerm]:
        """Drop blanks and duplicates, cap, and tag by position."""
        unique: list[str] = []
        seen: set[str] = set()
        for term in terms:
            cleaned = " ".join(term.split())
            key = cleaned.lower()
            if not cleaned or key in seen:
                continue
            seen.add(key)
            unique.append(cleaned)

        unique = unique[: Settings.MAX_CANDIDATE_TERMS]
        if not unique:
            unique = [Settings.GENERIC_FALLBACK_TERM]
        return [
            CandidateTerm(text=term, strategy_tag=tag)
            for term, tag in zip(unique, STRATEGY_ORDER)
        ]
