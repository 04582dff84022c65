"""Tests for food pairing prompt building and response mapping."""

import json

import pytest

from cellar.ai.llm import extract_json_object
from cellar.ai.pairing import build_pairing_prompt, get_food_pairing, parse_pairing_response
from cellar.errors import AIResponseError
from conftest import FakeLLM

WINES = [
    {"id": "a", "name": "Chablis", "vintage": 2020, "grapes": ["Chardonnay"], "quantity": 2, "price": 30},
    {"id": "b", "name": "Barolo", "vintage": None, "grapes": [], "quantity": 1, "price": None},
]


class TestExtractJsonObject:
    """Tests for extract_json_object."""

    def test_object_wrapped_in_prose(self):
        text = 'Here you go:\n```json\n{"a": {"b": 1}}\n```\nEnjoy!'
        assert extract_json_object(text) == {"a": {"b": 1}}

    def test_no_object(self):
        assert extract_json_object("no json here") is None
        assert extract_json_object("") is None

    def test_invalid_json_raises(self):
        with pytest.raises(ValueError):
            extract_json_object("{not json}")


class TestPairingPrompt:
    """Tests for build_pairing_prompt."""

    def test_wines_are_numbered_from_one(self):
        prompt = build_pairing_prompt("Fondue", WINES, "en")
        assert "1. Chablis (2020) - Grapes: Chardonnay, Quantity: 2, Price: $30" in prompt
        assert "2. Barolo - Grapes: Not specified, Quantity: 1" in prompt
        assert "Menu/Dish: Fondue" in prompt
        assert "Write all explanations in English." in prompt

    def test_swiss_german_instruction(self):
        prompt = build_pairing_prompt("Raclette", WINES, "de-CH")
        assert "Schweizer Hochdeutsch" in prompt


class TestParsePairingResponse:
    """Tests for parse_pairing_response."""

    def test_maps_indexes_to_wines(self):
        text = json.dumps(
            {"recommendations": [{"wineIndex": 2, "rank": 1, "pairingScore": 91, "explanation": "Tannins."}]}
        )
        result = parse_pairing_response(text, WINES)
        assert result == {
            "recommendations": [
                {
                    "wineId": "b",
                    "wineName": "Barolo",
                    "vintage": None,
                    "grapes": [],
                    "rank": 1,
                    "pairingScore": 91,
                    "explanation": "Tannins.",
                }
            ]
        }

    def test_out_of_range_indexes_are_dropped(self):
        text = json.dumps({"recommendations": [{"wineIndex": 0}, {"wineIndex": 3}, {"wineIndex": 1}]})
        result = parse_pairing_response(text, WINES)
        assert [r["wineId"] for r in result["recommendations"]] == ["a"]

    def test_unparsable_answer(self):
        with pytest.raises(AIResponseError, match="Failed to parse pairing response"):
            parse_pairing_response("I would pick the Chablis.", WINES)


class TestGetFoodPairing:
    """Tests for get_food_pairing."""

    @pytest.mark.anyio
    async def test_requests_and_maps(self):
        llm = FakeLLM('{"recommendations": [{"wineIndex": 1, "rank": 1, "pairingScore": 88, "explanation": "x"}]}')
        result = await get_food_pairing(llm, "Oysters", WINES, "en")
        assert result["recommendations"][0]["wineName"] == "Chablis"
        assert llm.calls[0]["max_tokens"] == 2048

    @pytest.mark.anyio
    async def test_default_language_is_swiss_german(self):
        llm = FakeLLM('{"recommendations": []}')
        await get_food_pairing(llm, "Rösti", WINES, None)
        assert "Schweizer Hochdeutsch" in llm.calls[0]["prompt"]

    @pytest.mark.anyio
    async def test_empty_cellar(self):
        with pytest.raises(ValueError, match="No wines available in your cellar for pairing"):
            await get_food_pairing(FakeLLM(), "Steak", [], "en")

    @pytest.mark.anyio
    async def test_unknown_language(self):
        with pytest.raises(ValueError):
            await get_food_pairing(FakeLLM(), "Steak", WINES, "fr")

    @pytest.mark.anyio
    async def test_empty_menu(self):
        with pytest.raises(ValueError, match="menu is required"):
            await get_food_pairing(FakeLLM(), "   ", WINES, "en")
