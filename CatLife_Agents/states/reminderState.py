from __future__ import annotations
from typing import List, Optional, Literal
from datetime import datetime
from pydantic import BaseModel, Field

ContactType = Literal["email", "sms"]
ReminderChannel = Literal["feed", "play", "litter", "vet"]
Priority = Literal["high", "medium", "low"]


class ReminderChannels(BaseModel):
    feed: bool = False
    play: bool = False
    litter: bool = False
    vet: bool = False

    def enabled(self) -> List[ReminderChannel]:
        return [c for c in ("feed", "play", "litter", "vet") if getattr(self, c)]


class ReminderSchedule(BaseModel):
    feed_times: List[str] = Field(default_factory=list)   # "07:30"
    play_times: List[str] = Field(default_factory=list)
    vet_interval_months: Optional[int] = Field(None, ge=1)


class ReminderSettings(BaseModel):
    id: Optional[str] = None
    contact_type: ContactType
    contact_value: str  # phone or email
    cat_name: str
    timezone: Optional[str] = None
    enabled: bool = True
    channels: ReminderChannels = Field(default_factory=ReminderChannels)
    schedule: ReminderSchedule = Field(default_factory=ReminderSchedule)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_sent_at: Optional[datetime] = None


class ReminderRecommendation(BaseModel):
    channel: ReminderChannel
    enabled: bool
    reason: str
    priority: Priority
    frequency: str = ""
    schedule: str = ""


class NotificationResult(BaseModel):
    success: bool
    channel: ContactType
    message_id: Optional[str] = None
    error: Optional[str] = None
