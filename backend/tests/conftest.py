"""Pytest fixtures for the exam extractor.

Provides reusable test fixtures for:
- A controllable clock (share expiry without sleeping)
- A fresh in-memory ShareStore per test
- A fake extraction engine with scripted responses
- A FastAPI test client wired to both

Usage:
    def test_share_round_trip(client, sample_record_json):
        response = client.post("/api/share", json={"data": sample_record_json, "expiresIn": 60})
        assert response.status_code == 200
"""

import os
import sys
from pathlib import Path
from typing import Generator, Optional

# Set environment variables BEFORE any imports to ensure they take effect
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))

import pytest
from fastapi.testclient import TestClient

from config import Settings
from domain.ai.ports import ExamDocument, EngineResult, ExtractionEnginePort
from domain.exams.models import ExamRecord
from extraction.service import ExtractionService
from main import create_app
from shares.store import ShareStore


START_TIME = 1_700_000_000


class FakeClock:
    """Epoch-seconds clock that only moves when told to."""

    def __init__(self, now: int = START_TIME):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


class FakeExtractionEngine(ExtractionEnginePort):
    """Extraction engine returning a scripted text, or raising a scripted error."""

    provider_name = "fake"

    def __init__(self, text: Optional[str] = None, error: Optional[Exception] = None):
        self.text = text
        self.error = error
        self.documents: list[ExamDocument] = []

    def extract(self, document: ExamDocument) -> EngineResult:
        self.documents.append(document)
        if self.error is not None:
            raise self.error
        return EngineResult(
            text=self.text,
            provider=self.provider_name,
            model="fake-model",
            tokens_in=1200,
            tokens_out=300,
            latency_ms=5,
        )


SAMPLE_RECORD_JSON = {
    "exam_type": "Lipid Panel",
    "exam_date": "2026-03-14",
    "laboratory_or_clinic": "Central Lab",
    "patient": {"name": "Jane Roe", "age": "52", "gender": "F", "id": "P-1029"},
    "results": [
        {
            "parameter": "Total Cholesterol",
            "value": "232",
            "unit": "mg/dL",
            "reference_range": "< 200",
            "status": "high",
        },
        {
            "parameter": "HDL",
            "value": "58",
            "unit": "mg/dL",
            "reference_range": "> 40",
            "status": "normal",
        },
    ],
    "physician": "Dr. A. Smith",
    "notes": "Fasting sample",
}


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> Generator[ShareStore, None, None]:
    """Fresh in-memory share store per test."""
    share_store = ShareStore.from_url("sqlite://", clock=clock)
    share_store.create_schema()
    try:
        yield share_store
    finally:
        share_store.dispose()


@pytest.fixture
def sample_record_json() -> dict:
    return {**SAMPLE_RECORD_JSON, "results": [dict(r) for r in SAMPLE_RECORD_JSON["results"]]}


@pytest.fixture
def sample_record(sample_record_json: dict) -> ExamRecord:
    return ExamRecord.model_validate(sample_record_json)


@pytest.fixture
def fake_engine() -> FakeExtractionEngine:
    return FakeExtractionEngine()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite://",
        ANTHROPIC_API_KEY=None,
        PUBLIC_BASE_URL=None,
        MAX_UPLOAD_SIZE_BYTES=1024 * 1024,
        LOG_JSON=False,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def app(settings: Settings, store: ShareStore, fake_engine: FakeExtractionEngine):
    return create_app(
        settings=settings,
        share_store=store,
        extraction_service=ExtractionService(fake_engine),
    )


@pytest.fixture
def client(app) -> TestClient:
    """Test client without lifespan: the store fixture owns the database."""
    return TestClient(app)
