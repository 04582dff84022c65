"""Tests for enrichment validation and planning."""

import json

import pytest

from cellar.ai.enrichment import (
    enrich_wine_data,
    enrich_wine_from_image,
    missing_fields,
    plan_enrichment,
    validate_enrichment,
)
from cellar.errors import NothingToEnrich
from conftest import FakeLLM

WINERIES = [{"id": "wy-1", "name": "Château Margaux", "country_code": "FR"}]


class TestValidateEnrichment:
    """Tests for validate_enrichment."""

    def test_keeps_valid_fields(self):
        data = validate_enrichment(
            {
                "grapes": ["Cabernet Sauvignon", " ", 3],
                "vintage": 2015,
                "drinkingWindow": {"start": 2022, "end": 2040},
                "winery": {"name": "Château Margaux", "countryCode": "fr", "matchedExistingId": "wy-1"},
                "price": 650.0,
                "foodPairings": "  Lammkarree, Trüffel ",
                "confidence": "high",
                "explanation": "Famous first growth.",
            },
            WINERIES,
        )
        assert data == {
            "confidence": "high",
            "explanation": "Famous first growth.",
            "grapes": ["Cabernet Sauvignon"],
            "vintage": 2015,
            "drinkingWindow": {"start": 2022, "end": 2040},
            "winery": {"name": "Château Margaux", "countryCode": "FR", "matchedExistingId": "wy-1"},
            "price": 650.0,
            "foodPairings": "Lammkarree, Trüffel",
        }

    def test_drops_invalid_fields(self):
        data = validate_enrichment(
            {
                "grapes": [],
                "vintage": 1700,
                "drinkingWindow": {"start": 2030, "end": 2020},
                "winery": {"name": "Somewhere", "countryCode": "XX"},
                "price": 0,
                "foodPairings": "   ",
                "confidence": "certain",
            }
        )
        assert data == {"confidence": "low", "explanation": "No explanation provided"}

    def test_unknown_matched_id_is_dropped(self):
        data = validate_enrichment(
            {"winery": {"name": "Other", "countryCode": "IT", "matchedExistingId": "nope"}}, WINERIES
        )
        assert data["winery"] == {"name": "Other", "countryCode": "IT"}

    def test_boolean_is_not_a_vintage(self):
        assert "vintage" not in validate_enrichment({"vintage": True})


class TestEnrichWineData:
    """Tests for enrich_wine_data and enrich_wine_from_image."""

    @pytest.mark.anyio
    async def test_returns_validated_data(self):
        llm = FakeLLM("Sure! " + json.dumps({"vintage": 2010, "confidence": "medium", "explanation": "ok"}))
        result = await enrich_wine_data(llm, "Tignanello", None, WINERIES)
        assert result == {"enrichmentData": {"confidence": "medium", "explanation": "ok", "vintage": 2010}}
        assert "Wine name: Tignanello" in llm.calls[0]["prompt"]
        assert '"Château Margaux" (FR) [ID: wy-1]' in llm.calls[0]["prompt"]

    @pytest.mark.anyio
    async def test_unparsable_answer(self):
        result = await enrich_wine_data(FakeLLM("I don't know this wine."), "Mystery")
        assert result == {"enrichmentData": None, "error": "Failed to parse enrichment response"}

    @pytest.mark.anyio
    async def test_name_is_required(self):
        with pytest.raises(ValueError):
            await enrich_wine_data(FakeLLM(), "  ")

    @pytest.mark.anyio
    async def test_image_is_sent_along(self):
        llm = FakeLLM('{"name": "Sassicaia", "confidence": "high", "explanation": "label"}')
        result = await enrich_wine_from_image(llm, "aGVsbG8=", "image/png")
        assert result["enrichmentData"]["name"] == "Sassicaia"
        assert llm.calls[0]["image_base64"] == "aGVsbG8="
        assert llm.calls[0]["image_media_type"] == "image/png"

    @pytest.mark.anyio
    async def test_image_media_type_checked(self):
        with pytest.raises(ValueError):
            await enrich_wine_from_image(FakeLLM(), "aGVsbG8=", "text/plain")


class TestPlanEnrichment:
    """Tests for missing_fields and plan_enrichment."""

    def test_missing_fields(self, wine):
        assert missing_fields(wine) == ["winery", "food_pairings"]

    def test_fills_only_empty_fields(self, wine):
        data = {
            "grapes": ["Nebbiolo", "Barbera"],
            "vintage": 2017,
            "foodPairings": "Brasato",
            "winery": {"name": "Giacomo Conterno", "countryCode": "IT", "matchedExistingId": "wy-9"},
        }
        changes, fields, to_create = plan_enrichment(wine, data)
        assert changes == {"food_pairings": "Brasato", "winery_id": "wy-9"}
        assert fields == ["food_pairings", "winery"]
        assert to_create is None

    def test_unmatched_winery_is_returned_for_creation(self, wine):
        data = {"winery": {"name": "Giacomo Conterno", "countryCode": "IT"}}
        changes, fields, to_create = plan_enrichment(wine, data)
        assert changes == {}
        assert fields == []
        assert to_create == {"name": "Giacomo Conterno", "country_code": "IT"}

    def test_drinking_window_maps_to_both_columns(self):
        wine = {"id": "x", "name": "x", "grapes": ["Syrah"], "vintage": 2019}
        changes, fields, _ = plan_enrichment(wine, {"drinkingWindow": {"start": 2023, "end": 2035}})
        assert changes == {"drink_window_start": 2023, "drink_window_end": 2035}
        assert fields == ["drinking_window"]

    def test_nothing_missing(self, wine):
        complete = {**wine, "winery_id": "wy-1", "food_pairings": "Risotto"}
        with pytest.raises(NothingToEnrich, match="All fields are already filled"):
            plan_enrichment(complete, {"vintage": 2010})
