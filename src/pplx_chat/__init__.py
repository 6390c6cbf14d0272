"""pplx-chat: a Perplexity chat front-end that can write files it is asked for."""

__version__ = "0.1.0"
