"""Inputs the channel layer hands to the responder."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class Conversation(BaseModel):
    """Conversation the inbound message belongs to."""

    id: str
    channel: Optional[str] = None


class ChannelActionHint(BaseModel):
    """Interactive action a channel can trigger (e.g. a webchat form)."""

    id: str
    trigger_hint: str
    requires_verification: bool = False


class ChannelActions(BaseModel):
    """Action menu plus the guest's verification state on that channel."""

    actions: List[ChannelActionHint] = Field(default_factory=list)
    verification_status: str = "unverified"

    @property
    def is_verified(self) -> bool:
        return self.verification_status == "verified"


class InboundMessage(BaseModel):
    """Guest message as delivered by a channel adapter."""

    content: str
    metadata: dict = Field(default_factory=dict)

    @field_validator("content")
    @classmethod
    def validate_content(cls, value: str) -> str:
        """Empty messages never reach the model."""
        cleaned = (value or "").strip()
        if not cleaned:
            raise ValueError("content must be provided")
        return cleaned

    def channel_actions(self) -> Optional[ChannelActions]:
        raw = self.metadata.get("channel_actions")
        if not raw:
            return None
        return ChannelActions.model_validate(raw)


class MessageDirection(str, Enum):
    """Who sent a stored message."""

    INBOUND = "inbound"
    OUTBOUND = "outbound"


class HistoryMessage(BaseModel):
    """Stored conversation turn."""

    direction: MessageDirection
    content: str


class GuestPreference(BaseModel):
    category: str
    value: str


class Guest(BaseModel):
    """Guest profile snapshot."""

    id: str
    first_name: str
    full_name: str
    loyalty_tier: Optional[str] = None
    vip_status: Optional[str] = None
    language: Optional[str] = None
    preferences: List[GuestPreference] = Field(default_factory=list)


class Reservation(BaseModel):
    """Reservation snapshot for the guest's current or next stay."""

    id: str
    confirmation_number: str
    room_number: Optional[str] = None
    room_type: str
    arrival_date: str
    departure_date: str
    is_checked_in: bool = False
    days_remaining: Optional[int] = None
    special_requests: List[str] = Field(default_factory=list)


class GuestContext(BaseModel):
    """Read-only guest and reservation facts resolved by the caller."""

    guest: Optional[Guest] = None
    reservation: Optional[Reservation] = None


class HotelProfile(BaseModel):
    """Property facts from hotel settings; every field is optional."""

    name: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    timezone: Optional[str] = None
    currency: Optional[str] = None
    check_in_time: Optional[str] = None
    check_out_time: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    website: Optional[str] = None
