from datetime import datetime, timezone
from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator

AccomplishmentType = Literal["big", "small"]

def _as_utc(v: datetime) -> datetime:
    # sqlite hands back naive datetimes even for timezone-aware columns
    if isinstance(v, datetime) and v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v

UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


# ---------- records (returned by every store) ----------

class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    display_name: str | None = None
    avatar_url: str | None = None
    created_at: UtcDatetime

class ProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    display_name: str | None = None
    avatar_url: str | None = None
    created_at: UtcDatetime
    updated_at: UtcDatetime

class AccomplishmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    content: str
    type: AccomplishmentType
    category: str
    month_year: str
    created_at: UtcDatetime
    profile_id: str


# ---------- payloads ----------

class SignUp(BaseModel):
    email: str = Field(..., min_length=3)
    password: str
    display_name: str | None = None
    avatar_url: str | None = None

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("email must contain '@'")
        return v

class SignIn(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return v.strip().lower()

class PasswordUpdate(BaseModel):
    password: str
    confirm_password: str

class ProfileUpdate(BaseModel):
    display_name: str | None = None
    avatar_url: str | None = None

class AccomplishmentCreate(BaseModel):
    content: str
    type: AccomplishmentType
    category: str                # "side note"

    @field_validator("content", "category")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v


# ---------- week view ----------

class WeekOut(BaseModel):
    week_start: datetime
    week_end: datetime
    is_current_week: bool
    is_revealed: bool
    count: int
    # None while the week is locked: the count shows, the content doesn't
    accomplishments: list[AccomplishmentOut] | None = None

class WeeksOut(BaseModel):
    now: datetime
    weeks: list[WeekOut]
