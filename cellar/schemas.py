"""Request bodies accepted by the HTTP API."""

from datetime import date, datetime
from typing import Annotated, Any, Dict, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field, PlainSerializer

# Ids are validated as UUIDs on the way in and handed to the services as strings.
Id = Annotated[UUID, PlainSerializer(str, return_type=str)]


class WineIn(BaseModel):
    name: str
    winery_id: Optional[Id] = None
    grapes: List[str] = Field(default_factory=list)
    vintage: Optional[int] = None
    quantity: int = 1
    price: Optional[float] = None
    bottle_size: int = 750
    drink_window_start: Optional[int] = None
    drink_window_end: Optional[int] = None
    food_pairings: Optional[str] = None
    photo_url: Optional[str] = None


class WineUpdate(BaseModel):
    name: Optional[str] = None
    winery_id: Optional[Id] = None
    grapes: Optional[List[str]] = None
    vintage: Optional[int] = None
    quantity: Optional[int] = None
    price: Optional[float] = None
    bottle_size: Optional[int] = None
    drink_window_start: Optional[int] = None
    drink_window_end: Optional[int] = None
    food_pairings: Optional[str] = None
    photo_url: Optional[str] = None


class WineryIn(BaseModel):
    name: str
    country_code: Optional[str] = None


class WineryUpdate(BaseModel):
    name: Optional[str] = None
    country_code: Optional[str] = None


class TastingNoteIn(BaseModel):
    wine_id: Id
    rating: int
    notes: Optional[str] = None
    tasted_at: Optional[date] = None


class TastingNoteUpdate(BaseModel):
    rating: Optional[int] = None
    notes: Optional[str] = None
    tasted_at: Optional[date] = None


class StockMovementIn(BaseModel):
    wine_id: Id
    movement_type: Literal["in", "out"] = "in"
    quantity: int = 1
    notes: Optional[str] = None
    movement_date: Optional[datetime] = None


class StockMovementUpdate(BaseModel):
    movement_type: Optional[Literal["in", "out"]] = None
    quantity: Optional[int] = None
    notes: Optional[str] = None
    movement_date: Optional[datetime] = None


class CellarIn(BaseModel):
    name: str
    description: Optional[str] = None


class WineLocationIn(BaseModel):
    wine_id: Id
    cellar_id: Id
    shelf: Optional[int] = None
    row: Optional[int] = None
    column: Optional[int] = None
    quantity: int = 1


class WineLocationUpdate(BaseModel):
    cellar_id: Optional[Id] = None
    shelf: Optional[int] = None
    row: Optional[int] = None
    column: Optional[int] = None
    quantity: Optional[int] = None


class SettingIn(BaseModel):
    value: Any = None


class PairingIn(BaseModel):
    menu: str
    language: Literal["en", "de-CH"] = "de-CH"


class BulkEnrichIn(BaseModel):
    wine_ids: List[Id]


class ImageIdentifyIn(BaseModel):
    base64Image: str
    imageMediaType: str


def changes_of(model: BaseModel) -> Dict[str, Any]:
    """Only the fields the client actually sent (explicit nulls included)."""
    return model.model_dump(exclude_unset=True)
