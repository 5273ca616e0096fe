"""Unit tests for the Anthropic extraction engine adapter.

The SDK client is replaced by a MagicMock; no network calls are made.
"""

import base64
from types import SimpleNamespace
from unittest.mock import MagicMock

import anthropic
import httpx
import pytest

from domain.ai.ports import (
    ExamDocument,
    LLMAuthError,
    LLMInvalidResponseError,
    LLMRateLimitError,
    LLMServiceError,
    LLMTimeoutError,
)
from extraction.prompts import EXAM_EXTRACT_V1_SYSTEM, EXAM_EXTRACT_V1_USER
from infrastructure.ai.anthropic_provider import FILES_API_BETA, AnthropicProvider

REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")


def make_response(*blocks, stop_reason="end_turn"):
    return SimpleNamespace(
        content=list(blocks),
        usage=SimpleNamespace(input_tokens=1500, output_tokens=240),
        stop_reason=stop_reason,
    )


def text_block(text):
    return SimpleNamespace(type="text", text=text)


def status_error(cls, code):
    return cls(f"HTTP {code}", response=httpx.Response(code, request=REQUEST), body=None)


@pytest.fixture
def sdk_client():
    client = MagicMock()
    client.messages.create.return_value = make_response(text_block('{"exam_type": "CBC"}'))
    client.beta.messages.create.return_value = make_response(text_block('{"exam_type": "MRI"}'))
    client.beta.files.upload.return_value = SimpleNamespace(id="file_abc")
    return client


@pytest.fixture
def provider(sdk_client):
    return AnthropicProvider(client=sdk_client, model="claude-test", max_tokens=1024, timeout=12.0)


@pytest.fixture
def png_document():
    return ExamDocument(content=b"\x89PNG\r\n\x1a\nfake", media_type="image/png", filename="cbc.png")


@pytest.fixture
def pdf_document():
    return ExamDocument(content=b"%PDF-1.4\nfake", media_type="application/pdf", filename="mri.pdf")


class TestInitialization:
    """Test provider construction"""

    def test_missing_api_key(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)

        with pytest.raises(ValueError, match="ANTHROPIC_API_KEY"):
            AnthropicProvider()

    def test_sdk_retries_disabled(self):
        provider = AnthropicProvider(api_key="sk-ant-test", timeout=7.0)

        assert provider.client.max_retries == 0


class TestImageExtraction:
    """Test inline image requests"""

    def test_sends_base64_image_and_prompts(self, provider, sdk_client, png_document):
        provider.extract(png_document)

        kwargs = sdk_client.messages.create.call_args.kwargs
        assert kwargs["model"] == "claude-test"
        assert kwargs["max_tokens"] == 1024
        assert kwargs["system"] == EXAM_EXTRACT_V1_SYSTEM
        assert kwargs["timeout"] == 12.0

        image_block, text_part = kwargs["messages"][0]["content"]
        assert image_block["source"]["media_type"] == "image/png"
        assert base64.b64decode(image_block["source"]["data"]) == png_document.content
        assert text_part == {"type": "text", "text": EXAM_EXTRACT_V1_USER}

    def test_returns_first_text_block(self, provider, sdk_client, png_document):
        sdk_client.messages.create.return_value = make_response(
            SimpleNamespace(type="thinking", thinking="..."),
            text_block("first"),
            text_block("second"),
        )

        result = provider.extract(png_document)

        assert result.text == "first"
        assert result.provider == "anthropic"
        assert result.model == "claude-test"
        assert result.tokens_in == 1500
        assert result.tokens_out == 240

    def test_no_text_block(self, provider, sdk_client, png_document):
        sdk_client.messages.create.return_value = make_response()

        assert provider.extract(png_document).text is None

    def test_truncation_warning(self, provider, sdk_client, png_document):
        sdk_client.messages.create.return_value = make_response(
            text_block('{"exam_type": '), stop_reason="max_tokens"
        )

        result = provider.extract(png_document)

        assert result.warnings == ["Output truncated at 1024 tokens"]

    def test_unsupported_media_type(self, provider):
        with pytest.raises(LLMInvalidResponseError):
            provider.extract(ExamDocument(content=b"x", media_type="text/plain"))


class TestPdfExtraction:
    """Test Files API document requests"""

    def test_uploads_references_and_deletes(self, provider, sdk_client, pdf_document):
        result = provider.extract(pdf_document)

        assert result.text == '{"exam_type": "MRI"}'
        sdk_client.beta.files.upload.assert_called_once_with(
            file=("mri.pdf", pdf_document.content, "application/pdf")
        )
        kwargs = sdk_client.beta.messages.create.call_args.kwargs
        assert kwargs["betas"] == [FILES_API_BETA]
        document_block = kwargs["messages"][0]["content"][0]
        assert document_block == {"type": "document", "source": {"type": "file", "file_id": "file_abc"}}
        sdk_client.beta.files.delete.assert_called_once_with("file_abc")
        sdk_client.messages.create.assert_not_called()

    def test_file_deleted_when_call_fails(self, provider, sdk_client, pdf_document):
        sdk_client.beta.messages.create.side_effect = anthropic.APITimeoutError(request=REQUEST)

        with pytest.raises(LLMTimeoutError):
            provider.extract(pdf_document)

        sdk_client.beta.files.delete.assert_called_once_with("file_abc")

    def test_delete_failure_does_not_mask_result(self, provider, sdk_client, pdf_document):
        sdk_client.beta.files.delete.side_effect = anthropic.APIConnectionError(request=REQUEST)

        result = provider.extract(pdf_document)

        assert result.text == '{"exam_type": "MRI"}'


class TestErrorMapping:
    """Test SDK errors map onto the LLMError hierarchy"""

    @pytest.mark.parametrize("sdk_error,expected", [
        (anthropic.APITimeoutError(request=REQUEST), LLMTimeoutError),
        (status_error(anthropic.RateLimitError, 429), LLMRateLimitError),
        (status_error(anthropic.AuthenticationError, 401), LLMAuthError),
        (status_error(anthropic.InternalServerError, 500), LLMServiceError),
        (anthropic.APIConnectionError(request=REQUEST), LLMServiceError),
    ])
    def test_error_mapping(self, provider, sdk_client, png_document, sdk_error, expected):
        sdk_client.messages.create.side_effect = sdk_error

        with pytest.raises(expected):
            provider.extract(png_document)
