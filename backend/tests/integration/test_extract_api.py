"""Integration tests for the extraction API

Tests POST /api/extract end to end with a scripted extraction engine:
- Image and PDF uploads
- Document validation
- Engine output failures
- Engine call failures
"""

import io
import json

import pytest
from fastapi import UploadFile
from fastapi.testclient import TestClient
from starlette.datastructures import Headers

from domain.ai.ports import LLMAuthError, LLMRateLimitError, LLMServiceError, LLMTimeoutError
from domain.errors import InvalidDocument
from extraction.router import extract_exam
from extraction.service import ExtractionService
from main import create_app

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
PDF_BYTES = b"%PDF-1.4\n%\xE2\xE3\xCF\xD3\n"


class CountingStream(io.BytesIO):
    """In-memory upload body that records how many bytes were read."""

    def __init__(self, data):
        super().__init__(data)
        self.bytes_read = 0

    def read(self, size=-1):
        chunk = super().read(size)
        self.bytes_read += len(chunk)
        return chunk


def upload(client, content=PNG_BYTES, media_type="image/png", filename="panel.png", field="image"):
    return client.post("/api/extract", files={field: (filename, content, media_type)})


class TestExtractSuccess:
    """Integration tests for successful extractions"""

    def test_extract_image(self, client: TestClient, fake_engine, sample_record_json):
        fake_engine.text = json.dumps(sample_record_json)

        response = upload(client)

        assert response.status_code == 200
        assert response.json() == sample_record_json
        document = fake_engine.documents[0]
        assert document.media_type == "image/png"
        assert document.content == PNG_BYTES
        assert document.filename == "panel.png"

    def test_extract_pdf(self, client: TestClient, fake_engine, sample_record_json):
        fake_engine.text = json.dumps(sample_record_json)

        response = upload(client, PDF_BYTES, "application/pdf", "report.pdf")

        assert response.status_code == 200
        assert fake_engine.documents[0].is_pdf

    def test_fenced_output(self, client: TestClient, fake_engine, sample_record_json):
        fake_engine.text = "```json\n" + json.dumps(sample_record_json) + "\n```"

        response = upload(client)

        assert response.status_code == 200
        assert response.json()["exam_type"] == "Lipid Panel"

    def test_defaults_and_status_tokens(self, client: TestClient, fake_engine):
        """Test that missing fields default and status tokens are normalized"""
        fake_engine.text = json.dumps({
            "exam_type": "CBC",
            "patient": None,
            "results": [{"parameter": "Hemoglobin", "value": 11.2, "status": " LOW "}],
        })

        body = upload(client).json()

        assert body["patient"]["name"] == ""
        assert body["results"][0] == {
            "parameter": "Hemoglobin",
            "value": "11.2",
            "unit": "",
            "reference_range": "",
            "status": "low",
        }
        assert body["physician"] == ""

    def test_extracted_record_can_be_shared(self, client: TestClient, fake_engine, sample_record_json):
        fake_engine.text = json.dumps(sample_record_json)
        record = upload(client).json()

        created = client.post("/api/share", json={"data": record, "expiresIn": 3600}).json()

        assert client.get(f"/api/share/{created['id']}").json()["data"] == record


class TestExtractValidation:
    """Integration tests for rejected uploads"""

    def test_unsupported_type(self, client: TestClient, fake_engine):
        response = upload(client, b"hello", "text/plain", "notes.txt")

        assert response.status_code == 400
        assert response.json() == {
            "error": "unsupported_input",
            "message": "Unsupported file type: text/plain. Use JPEG, PNG, GIF, WEBP, or PDF.",
        }
        assert fake_engine.documents == []

    def test_missing_file(self, client: TestClient, fake_engine):
        response = upload(client, field="document")

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_document"
        assert fake_engine.documents == []

    def test_empty_file(self, client: TestClient, fake_engine):
        response = upload(client, b"")

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_document"
        assert fake_engine.documents == []

    def test_oversized_file(self, client: TestClient, fake_engine, settings):
        response = upload(client, b"\x00" * (settings.MAX_UPLOAD_SIZE_BYTES + 1))

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_document"
        assert fake_engine.documents == []

    def test_oversized_upload_read_is_bounded(self, fake_engine, settings):
        """Test that at most one byte past the limit is read from an oversized upload"""
        stream = CountingStream(b"\x00" * (settings.MAX_UPLOAD_SIZE_BYTES * 3))
        image = UploadFile(
            file=stream,
            filename="huge.png",
            headers=Headers({"content-type": "image/png"}),
        )

        with pytest.raises(InvalidDocument):
            extract_exam(image=image, settings=settings, service=ExtractionService(fake_engine))

        assert stream.bytes_read == settings.MAX_UPLOAD_SIZE_BYTES + 1
        assert fake_engine.documents == []


class TestExtractFailures:
    """Integration tests for unusable engine output and engine errors"""

    def test_no_response_content(self, client: TestClient, fake_engine):
        fake_engine.text = None

        response = upload(client)

        assert response.status_code == 500
        assert response.json()["error"] == "no_response_content"

    @pytest.mark.parametrize("text", [
        "Sorry, the image is too blurry.",
        "[1, 2, 3]",
        '{"results": [{"parameter": "HDL", "status": "borderline"}]}',
    ])
    def test_malformed_response(self, client: TestClient, fake_engine, text):
        fake_engine.text = text

        response = upload(client)

        assert response.status_code == 500
        assert response.json()["error"] == "malformed_response"

    @pytest.mark.parametrize("error,status_code,kind", [
        (LLMTimeoutError("timeout"), 504, "extraction_timeout"),
        (LLMRateLimitError("rate limited"), 429, "extraction_rate_limited"),
        (LLMServiceError("overloaded"), 502, "extraction_unavailable"),
        (LLMAuthError("bad key"), 502, "extraction_unavailable"),
    ])
    def test_engine_errors(self, client: TestClient, fake_engine, error, status_code, kind):
        fake_engine.error = error

        response = upload(client)

        assert response.status_code == status_code
        assert response.json()["error"] == kind
        assert str(error) not in response.json()["message"]

    def test_extraction_not_configured(self, settings, store):
        """Test that a deployment without an API key rejects extraction but still shares"""
        client = TestClient(create_app(settings=settings, share_store=store))

        response = upload(client)

        assert response.status_code == 502
        assert response.json()["error"] == "extraction_unavailable"
