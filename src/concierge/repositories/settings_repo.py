"""Hotel settings accessor backed by the ``settings`` key/value table."""

import json
import re
from typing import Optional, Protocol

from sqlalchemy.engine import Engine

from concierge.models.conversation import HotelProfile
from concierge.repositories.sql_repo import SqlRepository

HOTEL_PROFILE_KEY = "hotel_profile"

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


class SettingsAccessor(Protocol):
    def get_hotel_profile(self) -> Optional[HotelProfile]: ...


def _snake_keys(raw: dict) -> dict:
    return {_CAMEL_RE.sub("_", key).lower(): value for key, value in raw.items()}


class SqlSettingsRepository:
    """Reads the JSON hotel profile stored under ``hotel_profile``."""

    def __init__(self, engine: Engine):
        self.db = SqlRepository(engine)

    def get_hotel_profile(self) -> Optional[HotelProfile]:
        row = self.db.fetch_one(
            "SELECT value FROM settings WHERE key = :key", {"key": HOTEL_PROFILE_KEY}
        )
        if not row:
            return None
        # Profiles written by the dashboard use camelCase keys.
        return HotelProfile.model_validate(_snake_keys(json.loads(row["value"])))
