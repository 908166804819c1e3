from datetime import datetime

from pydantic import BaseModel, ConfigDict


class LinkCreate(BaseModel):
    original: str
    custom_short: str | None = None
    expiration_date: datetime | None = None


class LinkOut(BaseModel):
    id: int
    original: str
    short: str
    qr_code: str
    custom_short: str | None = None
    expiration_date: datetime | None = None
    access_count: int

    model_config = ConfigDict(from_attributes=True)


class HealthOut(BaseModel):
    status: str
    env: str
