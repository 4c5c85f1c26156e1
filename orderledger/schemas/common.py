from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from orderledger.core.dates import ensure_utc


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class TimestampedRead(ORMModel):
    created_at: datetime
    updated_at: Optional[datetime] = None

    # SQLite hands back naive datetimes even for timezone-aware columns.
    @field_validator("created_at", "updated_at")
    @classmethod
    def _as_utc(cls, value):
        return ensure_utc(value)


class ErrorDetail(BaseModel):
    kind: str
    message: str
    details: Optional[dict] = None


class ErrorResponse(BaseModel):
    success: bool = False
    error: ErrorDetail
