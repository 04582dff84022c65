"""Shared fixtures: a signed-in user, an app without database and a fake model."""

import pytest
from fastapi.testclient import TestClient

from cellar.ai.llm import get_llm
from cellar.app.api import create_app
from cellar.app.auth import User, current_user

USER_ID = "6f1c2a4e-0000-4000-8000-000000000001"


@pytest.fixture
def anyio_backend():
    return "asyncio"


class FakeLLM:
    """Stands in for LLMClient: returns canned answers and records prompts."""

    def __init__(self, *answers: str):
        self.answers = list(answers)
        self.calls = []

    async def complete(self, prompt, max_tokens=1024, image_base64=None, image_media_type=None):
        self.calls.append(
            {
                "prompt": prompt,
                "max_tokens": max_tokens,
                "image_base64": image_base64,
                "image_media_type": image_media_type,
            }
        )
        if len(self.answers) > 1:
            return self.answers.pop(0)
        return self.answers[0] if self.answers else ""


@pytest.fixture
def user():
    return User(id=USER_ID, email="sommelier@example.com")


@pytest.fixture
def fake_llm():
    return FakeLLM('{"recommendations": []}')


@pytest.fixture
def app(user, fake_llm):
    """App with authentication and the model replaced; no photo mount."""
    application = create_app(serve_photos=False)
    application.dependency_overrides[current_user] = lambda: user
    application.dependency_overrides[get_llm] = lambda: fake_llm
    return application


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def wine():
    return {
        "id": "w-1",
        "user_id": USER_ID,
        "name": "Barolo Riserva",
        "grapes": ["Nebbiolo"],
        "vintage": 2016,
        "quantity": 3,
        "price": 65.0,
        "bottle_size": 750,
        "drink_window_start": 2024,
        "drink_window_end": 2040,
        "winery_id": None,
        "food_pairings": None,
        "photo_url": None,
    }
