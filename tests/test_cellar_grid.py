"""Tests for the cellar grid layout."""

import pytest

from cellar.domain.cellar_grid import build_cellar_grid, wine_color


def _loc(loc_id, shelf, row, column, grapes=None, quantity=1):
    return {
        "id": loc_id,
        "wine_id": f"wine-{loc_id}",
        "shelf": shelf,
        "row": row,
        "column": column,
        "quantity": quantity,
        "wine": {"id": f"wine-{loc_id}", "name": f"Wine {loc_id}", "vintage": 2019, "grapes": grapes or []},
    }


class TestWineColor:
    """Tests for wine_color."""

    @pytest.mark.parametrize(
        "grapes, color",
        [
            (["Pinot Noir"], "red"),
            (["Cabernet Franc"], "red"),
            (["Merlot", "Chardonnay"], "red"),
            (["Chardonnay"], "white"),
            (["Sauvignon Blanc"], "white"),
            (["Rosé de Provence"], "rose"),
            (["Nebbiolo"], "other"),
            ([], "other"),
            (None, "other"),
        ],
    )
    def test_first_grape_decides(self, grapes, color):
        assert wine_color(grapes) == color


class TestBuildCellarGrid:
    """Tests for build_cellar_grid."""

    def test_empty_cellar_has_one_empty_cell(self):
        grid = build_cellar_grid([])
        assert grid["dimensions"] == {"shelves": 1, "rows": 1, "columns": 1}
        cell = grid["shelves"][0]["rows"][0][0]
        assert cell == {"shelf": 1, "row": 1, "column": 1, "occupied": False, "color": "empty"}
        assert grid["unplaced"] == []

    def test_dimensions_follow_largest_coordinates(self):
        grid = build_cellar_grid([_loc("a", 2, 3, 4), _loc("b", 1, 1, 1)])
        assert grid["dimensions"] == {"shelves": 2, "rows": 3, "columns": 4}
        assert len(grid["shelves"]) == 2
        assert len(grid["shelves"][0]["rows"]) == 3
        assert len(grid["shelves"][0]["rows"][0]) == 4

    def test_partially_placed_location_widens_grid(self):
        grid = build_cellar_grid([_loc("a", 1, 1, 1), _loc("b", None, 5, None)])
        assert grid["dimensions"] == {"shelves": 1, "rows": 5, "columns": 1}
        assert [loc["id"] for loc in grid["unplaced"]] == ["b"]

    def test_occupied_cell_carries_wine(self):
        grid = build_cellar_grid([_loc("a", 1, 2, 1, grapes=["Riesling"], quantity=6)])
        cell = grid["shelves"][0]["rows"][1][0]
        assert cell["occupied"] is True
        assert cell["location_id"] == "a"
        assert cell["wine_id"] == "wine-a"
        assert cell["wine_name"] == "Wine a"
        assert cell["quantity"] == 6
        assert cell["color"] == "white"
        assert grid["shelves"][0]["occupied"] == 1

    def test_last_location_wins_shared_slot(self):
        grid = build_cellar_grid([_loc("a", 1, 1, 1), _loc("b", 1, 1, 1)])
        assert grid["shelves"][0]["rows"][0][0]["location_id"] == "b"

    def test_locations_without_coordinates_are_unplaced(self):
        grid = build_cellar_grid([_loc("a", 1, None, 1), _loc("b", 1, 1, 1)])
        assert [u["location_id"] for u in grid["unplaced"]] == ["a"]
        assert grid["shelves"][0]["occupied"] == 1
