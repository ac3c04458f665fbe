"""
Header download client.

Fetches remote headers into the local cache so they can be bound.
"""

from .http_client import HeaderFetcher, HeaderFetchError, get_fetcher, set_fetcher

__all__ = ["HeaderFetcher", "HeaderFetchError", "get_fetcher", "set_fetcher"]
