"""Data models for the marketplace catalog, users and notifications."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Severity = Literal["default", "destructive"]


class Rate(BaseModel):
    """A single star rating left on a service."""

    model_config = ConfigDict(extra="ignore")

    num_star: int = Field(ge=1, le=5)


class ProfileUser(BaseModel):
    """The user behind a provider profile, as embedded in a service."""

    model_config = ConfigDict(extra="ignore")

    id: int | None = None
    region_id: int | str


class Profile(BaseModel):
    """Provider profile embedded in a service payload."""

    model_config = ConfigDict(extra="ignore")

    id: int | None = None
    user: ProfileUser


class Service(BaseModel):
    """A service listing offered by a provider."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: int | str
    category_id: int | str
    title: str
    desc: str = ""
    price: float = Field(ge=0)
    created_at: datetime
    rates: tuple[Rate, ...] = Field(default_factory=tuple)
    profile: Profile


class Category(BaseModel):
    """A category grouping service listings."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: int | str
    name: str


class User(BaseModel):
    """Account record returned by the users endpoint."""

    model_config = ConfigDict(extra="ignore")

    id: int
    first_name: str
    last_name: str
    phone: str
    status: str
    role_id: int
    region_id: int
    city: str
    street: str
    image: str | None = None
    address: str
    email: str
    email_verified_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class Notification(BaseModel):
    """User-facing message delivered through the notification channel."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: str
    severity: Severity = "default"
