"""Registry of completion backends."""

from ..provider import CompletionProvider
from ..storage import KeyValueStore
from .perplexity import PerplexityProvider

PROVIDERS = {
    PerplexityProvider.name: PerplexityProvider,
}


def get_provider(store: KeyValueStore, name: str = "perplexity") -> CompletionProvider:
    """Build the named provider, reading its credential from `store`."""
    try:
        ProviderClass = PROVIDERS[name]
    except KeyError:
        raise ValueError(f"Unknown provider: {name}") from None
    return ProviderClass(store)
