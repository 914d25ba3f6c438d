"""
Pytest fixtures for the Food Calorie AI tests.
"""
import io
import os
import struct
import zlib
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from PIL import Image

# Mock environment variables before importing app
os.environ.setdefault("OPENAI_API_KEY", "test-api-key")
os.environ["PROFILE_STORAGE_PATH"] = ""
os.environ["RATE_LIMIT_ENABLED"] = "false"

from food_analyzer.main import app
from food_analyzer.models.profile import Profile
from food_analyzer.services.analyzer import build_analyzer, get_analyzer
from food_analyzer.services.profile_store import ProfileStore
from food_analyzer.services.storage import MemoryStorage


SALMON_REPLY = (
    "Grilled Salmon with Quinoa|450|0.95|38,35,22,6|"
    "Fresh salmon fillet (6 oz) with 1 cup quinoa and roasted vegetables.|"
    "Great choice for muscle recovery and brain health! Try adding more leafy greens for extra nutrients."
)


@pytest.fixture
def salmon_reply():
    """Well-formed six-field analysis reply."""
    return SALMON_REPLY


@pytest.fixture
def analyzer():
    """Analyzer with an in-memory profile."""
    return build_analyzer("")


@pytest.fixture
def client(analyzer):
    """Create a test client for the FastAPI app, wired to a fresh analyzer."""
    app.dependency_overrides[get_analyzer] = lambda: analyzer
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def mock_openai():
    """Mock OpenAI API calls."""
    mock = MagicMock()
    mock_response = MagicMock()
    mock_response.choices = [MagicMock(message=MagicMock(content=SALMON_REPLY))]
    mock.chat.completions.create = AsyncMock(return_value=mock_response)
    with patch("food_analyzer.services.openai_service.get_client", return_value=mock):
        yield mock


@pytest.fixture
def store():
    """Profile store over memory storage."""
    return ProfileStore(MemoryStorage())


@pytest.fixture
def sample_profile_update():
    """Complete biometrics plus preferences."""
    return {
        "weight": 70,
        "height": 175,
        "age": 30,
        "gender": "male",
        "activityLevel": "moderate",
        "dietaryPreferences": ["vegetarian"],
        "healthGoals": ["weight_loss"],
        "allergies": ["peanuts"]
    }


@pytest.fixture
def full_profile():
    """Profile with a calorie goal and every preference rule active."""
    return Profile(
        weight=70,
        height=175,
        age=30,
        gender="male",
        activityLevel="moderate",
        dailyCalorieGoal=2628,
        dietaryPreferences=["Vegetarian"],
        healthGoals=["weight_loss"],
        allergies=["peanuts", "shellfish"],
    )


def _image_bytes(image_format: str) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (16, 16), (200, 120, 40)).save(buf, format=image_format)
    return buf.getvalue()


@pytest.fixture
def png_bytes():
    """Small valid PNG image."""
    return _image_bytes("PNG")


@pytest.fixture
def bmp_bytes():
    """Small valid BMP image (not accepted by the vision model as-is)."""
    return _image_bytes("BMP")


@pytest.fixture
def huge_header_png_bytes():
    """Tiny PNG whose header declares 20000x20000 pixels."""
    def chunk(kind: bytes, data: bytes) -> bytes:
        crc = zlib.crc32(kind + data) & 0xFFFFFFFF
        return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", crc)

    ihdr = struct.pack(">IIBBBBB", 20000, 20000, 8, 2, 0, 0, 0)
    return b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", ihdr) + chunk(b"IDAT", b"") + chunk(b"IEND", b"")
