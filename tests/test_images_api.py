"""Tests for the image generation endpoint."""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from playground.core.errors import ConfigurationError, GenerationError
from playground.main import app

client = TestClient(app)


@pytest.fixture
def mock_image():
    with patch("playground.api.images.generate_image", new_callable=AsyncMock) as generate:
        generate.return_value = "aW1hZ2U="
        yield generate


def test_returns_data_url(origin_headers, mock_image):
    response = client.post("/api/generate-image", json={"prompt": "a robot dog"}, headers=origin_headers)
    assert response.status_code == 200
    assert response.json() == {"image": "data:image/png;base64,aW1hZ2U="}
    mock_image.assert_awaited_once_with("a robot dog")


def test_blank_prompt_rejected(origin_headers, mock_image):
    response = client.post("/api/generate-image", json={"prompt": "  "}, headers=origin_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Prompt is required"
    mock_image.assert_not_awaited()


def test_forbidden_origin(mock_image):
    response = client.post(
        "/api/generate-image",
        json={"prompt": "a robot dog"},
        headers={"Origin": "https://evil.example.org"},
    )
    assert response.status_code == 403
    mock_image.assert_not_awaited()


def test_missing_key(origin_headers, mock_image):
    mock_image.side_effect = ConfigurationError("OPENAI_API_KEY env var is empty")
    response = client.post("/api/generate-image", json={"prompt": "a robot dog"}, headers=origin_headers)
    assert response.status_code == 500
    assert response.json()["detail"] == "Missing configuration: OPENAI_API_KEY env var is empty"


def test_upstream_status_is_forwarded(origin_headers, mock_image):
    mock_image.side_effect = GenerationError("Image API error", status_code=400, details="x" * 900)
    response = client.post("/api/generate-image", json={"prompt": "a robot dog"}, headers=origin_headers)
    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["message"] == "Image API error"
    assert len(detail["details"]) == 500


def test_no_image_returned(origin_headers, mock_image):
    mock_image.side_effect = GenerationError("No image returned", status_code=500)
    response = client.post("/api/generate-image", json={"prompt": "a robot dog"}, headers=origin_headers)
    assert response.status_code == 500
    assert response.json()["detail"]["message"] == "No image returned"
