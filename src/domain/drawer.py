from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import NewType, Protocol, TypeAlias

from pydantic import BaseModel, Field, model_validator

from domain.denominations import DenominationCount, total_cents
from utils.money import cents_to_decimal

DrawerId = NewType("DrawerId", str)

# The standing till makeup a drawer should hold after closing.
TargetProfile: TypeAlias = DenominationCount


class DrawerNotFoundError(Exception):
    def __init__(self, *, drawer_id: str) -> None:
        self.drawer_id = drawer_id
        super().__init__(f"Drawer settings not found for drawer={drawer_id}")


class DuplicateDrawerError(Exception):
    def __init__(self, *, field: str, value: str) -> None:
        self.field = field
        self.value = value
        super().__init__(f"Drawer {field} already exists: {value}")


class DrawerSettings(BaseModel):
    id: DrawerId
    name: str
    target_denominations: TargetProfile = Field(default_factory=DenominationCount.zero)
    is_active: bool = True
    show_detailed_calculations: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @model_validator(mode="after")
    def _validate_fields(self) -> DrawerSettings:
        if not self.id.strip():
            raise ValueError("DrawerSettings.id must be non-empty")
        if not self.name.strip():
            raise ValueError("DrawerSettings.name must be non-empty")
        return self

    @property
    def total_amount_cents(self) -> int:
        return total_cents(self.target_denominations)

    @property
    def total_amount(self) -> Decimal:
        return cents_to_decimal(self.total_amount_cents)


class DrawerSettingsSource(Protocol):
    """Read access to drawer settings, keyed by drawer id."""

    def get(self, drawer_id: str) -> DrawerSettings | None: ...


DEFAULT_DRAWERS: tuple[tuple[str, str], ...] = (
    ("state-inspector", "State Inspector Drawer"),
    ("service-writer", "Service Writer Drawer"),
)


def default_drawer_settings() -> list[DrawerSettings]:
    return [DrawerSettings(id=DrawerId(drawer_id), name=name) for drawer_id, name in DEFAULT_DRAWERS]
