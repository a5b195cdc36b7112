"""Fake aioboto3 session and client for adapter tests."""
from typing import Any, Dict, List, Optional, Tuple

import pytest
from botocore.exceptions import ClientError


def client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": f"{code} raised"}}, operation)


class FakePaginator:
    def __init__(self, client: "FakeClient", operation: str):
        self.client = client
        self.operation = operation

    async def _pages(self, kwargs):
        self.client.calls.append((self.operation, kwargs))
        if self.operation in self.client.errors:
            raise self.client.errors[self.operation]
        for page in self.client.pages.get(self.operation, []):
            yield page

    def paginate(self, **kwargs):
        return self._pages(kwargs)


class FakeClient:
    """Records every API call and answers from canned responses."""

    def __init__(self):
        self.responses: Dict[str, Any] = {}
        self.errors: Dict[str, Exception] = {}
        self.pages: Dict[str, List[dict]] = {}
        self.calls: List[Tuple[str, dict]] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    def get_paginator(self, operation: str) -> FakePaginator:
        return FakePaginator(self, operation)

    def __getattr__(self, operation: str):
        if operation.startswith("_"):
            raise AttributeError(operation)

        async def call(**kwargs):
            self.calls.append((operation, kwargs))
            if operation in self.errors:
                raise self.errors[operation]
            return self.responses.get(operation, {})

        return call


class FakeSession:
    def __init__(self, client: FakeClient, error: Optional[Exception] = None):
        self._client = client
        self.error = error
        self.opened: List[Tuple[str, dict]] = []

    def client(self, service_name: str, **kwargs):
        self.opened.append((service_name, kwargs))
        if self.error:
            raise self.error
        return self._client


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def fake_session(fake_client) -> FakeSession:
    return FakeSession(fake_client)


@pytest.fixture
def failing_session(fake_client):
    """Build a session whose client creation raises the given error."""
    def build(error: Exception) -> FakeSession:
        return FakeSession(fake_client, error=error)
    return build


@pytest.fixture
def make_client_error():
    return client_error
