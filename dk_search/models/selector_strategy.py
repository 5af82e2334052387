# dk_search/models/selector_strategy.py

"""Named CSS selector used by the page extractor cascades."""

from dataclasses import dataclass

from bs4 import Tag


@dataclass(frozen=True)
class SelectorStrategy:
    """A named CSS selector tried in a fixed priority order."""

    name: str
    css: str

    def match(self, root: Tag) -> list[Tag]:
        """Return every element under *root* matching this selector."""
        return list(root.select(self.css))

    def first(self, root: Tag) -> Tag | None:
        """Return the first element under *root*, or ``None``."""
        found: Tag | None = root.select_one(self.css)
        return found
