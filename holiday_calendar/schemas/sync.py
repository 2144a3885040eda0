import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class SyncRequest(BaseModel):
    year: int | None = Field(None, ge=1900, le=2200)


class SyncResult(BaseModel):
    year: int
    total: int = 0
    recurring: int = 0
    providers: dict[str, int] = Field(default_factory=dict)


class SyncResponse(BaseModel):
    message: str
    synced: SyncResult


class SyncLogResponse(BaseModel):
    id: uuid.UUID
    source: str
    status: str
    message: str | None = None
    synced_at: datetime
    model_config = ConfigDict(from_attributes=True)
