from .token_spam_filter import TokenSpamFilter

__all__ = [
    "TokenSpamFilter",
]
