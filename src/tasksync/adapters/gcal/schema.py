"""Pydantic models describing Calendar API v3 event payloads."""

from __future__ import annotations

import datetime as dt  # noqa: TC003 - pydantic resolves annotations at runtime

from pydantic import BaseModel, ConfigDict, Field


class CalendarBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class EventDateTime(CalendarBaseModel):
    date: dt.date | None = None
    date_time: dt.datetime | None = Field(default=None, alias="dateTime")
    time_zone: str | None = Field(default=None, alias="timeZone")


class ExtendedProperties(CalendarBaseModel):
    private: dict[str, str] = Field(default_factory=dict[str, str])
    shared: dict[str, str] = Field(default_factory=dict[str, str])


class EventPayload(CalendarBaseModel):
    id: str
    summary: str = ""
    description: str | None = None
    status: str = "confirmed"
    start: EventDateTime | None = None
    end: EventDateTime | None = None
    extended_properties: ExtendedProperties | None = Field(default=None, alias="extendedProperties")


class EventListPayload(CalendarBaseModel):
    items: list[EventPayload] = Field(default_factory=list[EventPayload])
    next_page_token: str | None = Field(default=None, alias="nextPageToken")


class ErrorDetail(CalendarBaseModel):
    code: int | None = None
    message: str = ""


class ErrorPayload(CalendarBaseModel):
    error: ErrorDetail
