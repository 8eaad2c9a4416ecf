# emoji_index/core/domain/exceptions.py
"""
Error taxonomy of the emoji index.

Data-source and cache adapters raise these; the index provider's load
pipeline decides whether to fall through (cache -> fallback -> network) or
surface them. Underlying library exceptions are chained via ``raise ... from``.
"""

from typing import Optional


class DomainError(Exception):
    """Base class for all errors raised by this package."""
    pass


class EmojiIndexError(DomainError):
    recovery_suggestion: str = ""


class NetworkUnavailableError(EmojiIndexError):
    recovery_suggestion = "Check your internet connection and try again."

    def __init__(self, message: str = "Network unavailable"):
        super().__init__(message)


class InvalidResponseError(EmojiIndexError):
    recovery_suggestion = "The emoji data server may be temporarily unavailable. Try again later."

    def __init__(self, status_code: int, url: Optional[str] = None):
        self.status_code = status_code
        self.url = url
        super().__init__(f"Invalid server response (HTTP {status_code})")


class DecodingFailedError(EmojiIndexError):
    recovery_suggestion = "The emoji data format may have changed. Try updating the package."

    def __init__(self, message: str = "Failed to decode emoji data"):
        super().__init__(message)


class CacheReadError(EmojiIndexError):
    recovery_suggestion = "Try clearing the cache and restarting."

    def __init__(self, message: str = "Failed to read cache"):
        super().__init__(message)


class CacheWriteError(EmojiIndexError):
    recovery_suggestion = "Try clearing the cache and restarting."

    def __init__(self, message: str = "Failed to write cache"):
        super().__init__(message)


class NoDataAvailableError(EmojiIndexError):
    recovery_suggestion = "Connect to the internet to download emoji data."

    def __init__(self, message: str = "No emoji data available"):
        super().__init__(message)


class EmptyDataError(EmojiIndexError):
    recovery_suggestion = "The data source may be temporarily unavailable. Try again later."

    def __init__(self, message: str = "Data source returned empty data"):
        super().__init__(message)


class InvalidURLError(EmojiIndexError):
    recovery_suggestion = "Check the data source URL configuration."

    def __init__(self, url: Optional[str]):
        self.url = url
        super().__init__(f"Invalid URL: {url}")


class SourceUnavailableError(EmojiIndexError):
    recovery_suggestion = "This data source is not available on this platform."

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Data source unavailable: {reason}")


__all__ = [
    "DomainError",
    "EmojiIndexError",
    "NetworkUnavailableError",
    "InvalidResponseError",
    "DecodingFailedError",
    "CacheReadError",
    "CacheWriteError",
    "NoDataAvailableError",
    "EmptyDataError",
    "InvalidURLError",
    "SourceUnavailableError",
]
