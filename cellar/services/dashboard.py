"""Dashboard figures for the signed-in user."""

from typing import Any, Dict

from cellar.domain.dashboard import dashboard_stats
from cellar.domain.drinking import current_year
from cellar.services.tasting_notes import list_tasting_notes
from cellar.services.wines import list_wines

RECENT_TASTINGS = 5


async def get_dashboard(user_id: str) -> Dict[str, Any]:
    wines = await list_wines(user_id)
    notes = await list_tasting_notes(user_id, limit=RECENT_TASTINGS)
    return dashboard_stats(wines, notes, current_year())
