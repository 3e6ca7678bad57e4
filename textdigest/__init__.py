"""textdigest: structured text summaries from a chat-completion provider."""

__version__ = "1.0.0"
