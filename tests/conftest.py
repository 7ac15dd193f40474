"""Shared fixtures for meeting pipeline tests.

Provides:
- A MeetingPipeline over a fresh InMemoryMeetingStore per test
- A FastAPI app serving that pipeline
- An async HTTP client bound to the app through ASGITransport
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.callsnap.main import create_app
from src.callsnap.meetings.pipeline import MeetingPipeline
from src.callsnap.meetings.processing.transcription import CorpusTranscriptionBackend
from src.callsnap.meetings.repository import InMemoryMeetingStore


@pytest.fixture
def store() -> InMemoryMeetingStore:
    return InMemoryMeetingStore()


@pytest.fixture
def pipeline(store: InMemoryMeetingStore) -> MeetingPipeline:
    return MeetingPipeline(store=store, transcription_backend=CorpusTranscriptionBackend())


@pytest.fixture
def app(pipeline: MeetingPipeline):
    return create_app(pipeline=pipeline)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing the API."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
