# dk_search/llm/prompts.py

"""Prompt text for AI-assisted search term optimisation."""

from dk_search.models.query import Classification, Language

SEARCH_SYSTEM_PROMPT = (
    "You are an expert product search analyst for Digikala.com. "
    "You reply with a single JSON object and nothing else."
)

_LANGUAGE_LABELS: dict[Language, str] = {
    Language.PERSIAN: "Persian (Primary) with some English terms",
    Language.ENGLISH: "English (Primary) with some Persian terms",
    Language.MIXED: "Mixed Persian/English",
    Language.UNKNOWN: "Unknown",
}

_BUDGET_LABELS: dict[str, str] = {
    "budget": "budget_conscious",
    "premium": "premium_seeker",
    "mid_range": "mid_range",
    "flexible": "flexible",
}


def _join(items: object) -> str:
    values = sorted(items) if isinstance(items, frozenset) else items
    text = ", ".join(str(v) for v in values)  # type: ignore[attr-defined]
    return text or "none"


def build_search_optimization_prompt(
    user_query: str,
    classification: Classification,
) -> str:
    """Ask for three ranked search terms for *user_query*."""
    return f"""Optimize the following query for product discovery on Digikala.com.

Original user query: "{user_query}"

Context:
- Language: {_LANGUAGE_LABELS[classification.language]}
- Intent: {_join(classification.intents)}
- Budget indicators: {_BUDGET_LABELS.get(classification.budget_preference, "flexible")}
- Category hints: {_join(classification.category_hints)}
- Brands mentioned: {_join(classification.brands)}
- Categories mentioned: {_join(c.keyword for c in classification.categories)}
- Features requested: {_join(classification.features)}

Generate 3 optimized search terms that would return the most relevant products:
1. Primary search term (most specific)
2. Alternative search term (broader category)
3. Fallback search term (generic but relevant)

Consider:
- Persian vs English keywords
- Brand synonyms and variations
- Category-specific terminology
- Price range indicators
- Feature requirements mentioned

Return in JSON format:
{{
  "primary": "optimized_term_1",
  "alternative": "optimized_term_2",
  "fallback": "optimized_term_3",
  "reasoning": "explanation of optimization strategy"
}}
"""
