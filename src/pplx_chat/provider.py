"""Abstract base class for completion providers."""

from abc import ABC, abstractmethod

from .core import CompletionResult


class CompletionProvider(ABC):
    """Base class for remote language-model backends.

    Implementations never raise for expected failures (missing key, HTTP
    error, network error); they return a CompletionResult tagged with the
    error kind and a user-facing text.
    """

    name: str  # "perplexity"

    @abstractmethod
    async def complete(self, prompt: str, model: str) -> CompletionResult:
        """Send a single-turn prompt to `model` and return its answer."""
        ...
