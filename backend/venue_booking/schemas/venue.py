"""
Pydantic schemas for the venue catalog.
"""

from typing import Optional
from pydantic import BaseModel


class VenueResponse(BaseModel):
    id: int
    name: str
    address: Optional[str] = None
    capacity: Optional[int] = None
    description: Optional[str] = None

    model_config = {"from_attributes": True}
