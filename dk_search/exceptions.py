# dk_search/exceptions.py

"""Exceptions marking the expected failure modes of a search."""


class DkSearchError(Exception):
    """Base exception for dk_search errors."""


class CompletionError(DkSearchError):
    """The AI completion collaborator failed or replied unusably."""


class NavigationError(DkSearchError):
    """A page navigation or render failed."""


class SessionUnavailableError(DkSearchError):
    """No browser engine could be started."""


class FetchCancelled(DkSearchError):
    """The request was cancelled while a fetch was in flight."""
