from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone

from pydantic import BaseModel, model_validator


class RecordFilters(BaseModel):
    """Query filters shared by drawer counts and bank deposits.

    Dates are inclusive calendar days in UTC. Bank deposits ignore ``drawer_id``.
    """

    drawer_id: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    user_id: str | None = None

    @model_validator(mode="after")
    def _validate_range(self) -> RecordFilters:
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self

    @property
    def starts_at(self) -> datetime | None:
        if self.start_date is None:
            return None
        return datetime.combine(self.start_date, time.min, tzinfo=timezone.utc)

    @property
    def ends_before(self) -> datetime | None:
        if self.end_date is None:
            return None
        return datetime.combine(self.end_date + timedelta(days=1), time.min, tzinfo=timezone.utc)

    def dates_only(self) -> RecordFilters:
        """The same date range with the drawer and user filters dropped."""
        return RecordFilters(start_date=self.start_date, end_date=self.end_date)
