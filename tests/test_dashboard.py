"""Tests for dashboard statistics."""

from cellar.domain.dashboard import dashboard_stats


def test_dashboard_stats():
    wines = [
        {"id": "a", "name": "Chablis", "quantity": 2, "price": 30.5, "grapes": ["Chardonnay"],
         "drink_window_start": 2020, "drink_window_end": 2030},
        {"id": "b", "name": "Pauillac", "quantity": 1, "price": None,
         "grapes": ["Cabernet Sauvignon", "Merlot"], "drink_window_start": 2030},
        {"id": "c", "name": "Pomerol", "quantity": None, "price": 80, "grapes": ["Merlot"]},
    ]
    notes = [
        {"id": "n1", "wine_id": "a", "rating": 4, "tasted_at": "2025-03-01"},
        {"id": "n2", "wine_id": "gone", "rating": 2, "tasted_at": "2025-02-01"},
    ]

    stats = dashboard_stats(wines, notes, 2025)

    assert stats["total_bottles"] == 3
    assert stats["total_value"] == 61.0
    assert stats["total_wines"] == 3
    assert stats["ready_to_drink"] == 1
    assert stats["tasting_notes_count"] == 2
    assert stats["top_grapes"][0] == {"grape": "Merlot", "count": 2}
    assert [g["grape"] for g in stats["top_grapes"][1:]] == ["Chardonnay", "Cabernet Sauvignon"]
    assert [t["wine_name"] for t in stats["recent_tastings"]] == ["Chablis", "Unknown"]


def test_top_grapes_limited_to_five():
    wines = [{"id": str(i), "name": str(i), "grapes": [f"Grape {i}"]} for i in range(8)]
    stats = dashboard_stats(wines, [], 2025)
    assert len(stats["top_grapes"]) == 5
    assert stats["top_grapes"][0]["grape"] == "Grape 0"


def test_empty_cellar():
    stats = dashboard_stats([], [], 2025)
    assert stats["total_bottles"] == 0
    assert stats["total_value"] == 0
    assert stats["top_grapes"] == []
    assert stats["recent_tastings"] == []
