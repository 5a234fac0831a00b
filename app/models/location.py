"""Location data models using Pydantic."""
from typing import Optional

from pydantic import BaseModel, Field


class LocationData(BaseModel):
    """A resolved place, from IP geolocation or city search."""
    city: str = ""
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    state: Optional[str] = None
    country: Optional[str] = None
