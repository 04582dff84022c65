"""Tests for input validation in the data services."""

import pytest

from cellar.services.cellars import _nest_location, _validate_location
from cellar.services.tasting_notes import _check_rating
from cellar.services.wineries import normalize_country_code
from cellar.services.wines import photo_path, validate_wine


class TestValidateWine:
    """Tests for validate_wine."""

    def test_valid(self):
        validate_wine({"name": "Barolo", "quantity": 0, "vintage": 2016,
                       "drink_window_start": 2024, "drink_window_end": 2024})

    @pytest.mark.parametrize(
        "data, message",
        [
            ({"name": "  "}, "name is required"),
            ({"name": "x", "quantity": -1}, "quantity"),
            ({"name": "x", "vintage": 1799}, "vintage"),
            ({"name": "x", "vintage": 2101}, "vintage"),
            ({"name": "x", "price": -5}, "price"),
            ({"name": "x", "drink_window_start": 2030, "drink_window_end": 2020}, "drink_window_start"),
        ],
    )
    def test_invalid(self, data, message):
        with pytest.raises(ValueError, match=message):
            validate_wine(data)

    def test_partial_update_without_name(self):
        validate_wine({"quantity": 4}, partial=True)

    def test_partial_update_cannot_blank_name(self):
        with pytest.raises(ValueError):
            validate_wine({"name": ""}, partial=True)


class TestPhotoPath:
    """Tests for photo_path."""

    def test_extension_is_lowered(self):
        assert photo_path("u", "w", "Label.JPG") == "u/w.jpg"

    @pytest.mark.parametrize("filename", ["label.pdf", "label", ""])
    def test_rejects_non_images(self, filename):
        with pytest.raises(ValueError):
            photo_path("u", "w", filename)


class TestCountryCode:
    """Tests for normalize_country_code."""

    def test_upper_cased(self):
        assert normalize_country_code(" ch ") == "CH"

    def test_empty_is_none(self):
        assert normalize_country_code("") is None
        assert normalize_country_code(None) is None

    @pytest.mark.parametrize("code", ["CHE", "C", "1A"])
    def test_invalid(self, code):
        with pytest.raises(ValueError):
            normalize_country_code(code)


class TestRating:
    """Tests for tasting note ratings."""

    @pytest.mark.parametrize("rating", [1, 3, 5])
    def test_valid(self, rating):
        assert _check_rating(rating) == rating

    @pytest.mark.parametrize("rating", [0, 6, 4.5, "4", True, None])
    def test_invalid(self, rating):
        with pytest.raises(ValueError):
            _check_rating(rating)


class TestWineLocations:
    """Tests for wine location validation and nesting."""

    def test_coordinates_must_be_positive(self):
        with pytest.raises(ValueError, match="shelf"):
            _validate_location({"shelf": 0})

    def test_quantity_at_least_one(self):
        with pytest.raises(ValueError, match="quantity"):
            _validate_location({"quantity": 0})

    def test_unset_values_are_fine(self):
        _validate_location({"shelf": None, "row": 2})

    def test_nesting(self):
        loc = _nest_location(
            {
                "id": "l-1",
                "wine_id": "w-1",
                "cellar_id": "c-1",
                "shelf": 1,
                "row": 2,
                "column": 3,
                "quantity": 2,
                "cellar_name": "Basement",
                "wine_name": "Barolo",
                "wine_vintage": 2016,
                "wine_grapes": ["Nebbiolo"],
                "wine_quantity": 6,
                "winery_name": None,
            }
        )
        assert loc["cellar"] == {"name": "Basement"}
        assert loc["wine"] == {
            "id": "w-1",
            "name": "Barolo",
            "vintage": 2016,
            "grapes": ["Nebbiolo"],
            "quantity": 6,
            "winery": None,
        }
        assert "wine_name" not in loc
        assert loc["shelf"] == 1 and loc["wine_id"] == "w-1"
