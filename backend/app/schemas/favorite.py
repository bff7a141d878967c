# app/schemas/favorite.py
import uuid
from typing import Optional

from pydantic import BaseModel


class FavoriteIn(BaseModel):
    promptId: Optional[uuid.UUID] = None  # Checked in the route so a missing id reads "promptId is required"
