from __future__ import annotations


class FeedMergerError(Exception):
    pass


class FetchError(FeedMergerError):
    """The remote server answered, but not with a usable document."""

    def __init__(self, url: str, status: int) -> None:
        super().__init__(f"Status code {status}")
        self.url = url
        self.status = status


class NotAFeedError(FeedMergerError):
    pass


class InvalidFeedError(FeedMergerError):
    pass


class NoSourcesError(FeedMergerError):
    pass
