"""Shared fixtures: an in-memory fetch stub standing in for HTTP."""

from __future__ import annotations

from collections import Counter
from typing import Dict, Tuple, Union

import pytest

from site_snapshot.errors import FetchFailure
from site_snapshot.models import FetchedResource


class StubFetcher:
    """Serves canned bodies by URL and counts every call."""

    def __init__(self, responses: Dict[str, Union[Tuple[bytes, str], Exception]]):
        self.responses = dict(responses)
        self.calls: Counter = Counter()

    def __call__(self, url: str) -> FetchedResource:
        self.calls[url] += 1
        response = self.responses.get(url)
        if response is None:
            raise FetchFailure(url, "HTTP 404")
        if isinstance(response, Exception):
            raise response
        content, content_type = response
        return FetchedResource(url=url, content=content, content_type=content_type)


@pytest.fixture
def stub_fetcher():
    def factory(responses):
        return StubFetcher(responses)

    return factory
