"""Pydantic models for the publishing host."""

from datetime import date, datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, field_validator


def utc_now() -> datetime:
    """Get current UTC time with timezone info."""
    return datetime.now(timezone.utc)


class SubscriptionKind(str, Enum):
    """Who a subscription was sold to."""

    INDIVIDUAL = "individual"
    INSTITUTIONAL = "institutional"


class SectionType(str, Enum):
    """How the wizard renders a section."""

    FIELDS = "fields"
    TEMPLATE = "template"


class Venue(BaseModel):
    """A journal or other publication context."""

    id: int
    path: str = Field(..., min_length=1, max_length=64)
    name: str = ""

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Venue paths are URL slugs."""
        if not v.replace("-", "").replace("_", "").isalnum():
            raise ValueError("Venue path must be alphanumeric with dashes or underscores")
        return v.lower()


class Visitor(BaseModel):
    """A registered user of the host."""

    id: int
    username: str = ""
    display_name: str | None = None


class RoleAssignment(BaseModel):
    """A role held by a visitor within one venue.

    Role names are qualified, e.g. ``user.role.manager``.
    """

    user_id: int
    venue_id: int
    role: str

    @property
    def short_name(self) -> str:
        """Last dot-separated segment of the qualified role name."""
        return self.role.split(".")[-1]


class Subscription(BaseModel):
    """An individual or institutional subscription record."""

    id: int
    kind: SubscriptionKind = SubscriptionKind.INDIVIDUAL
    venue_id: int
    user_id: int
    type_name: str
    date_start: date | None = None
    date_end: date | None = None
    institution: str | None = None

    def is_expired(self, today: date | None = None) -> bool:
        """Check if the subscription end date has passed.

        Records without an end date never expire.
        """
        if self.date_end is None:
            return False
        if today is None:
            today = utc_now().date()
        return self.date_end < today


class WizardSection(BaseModel):
    """One section inside a submission wizard step."""

    id: str
    type: SectionType = SectionType.FIELDS


class WizardStep(BaseModel):
    """One step of the multi-step submission wizard."""

    id: str
    name: str = ""
    sections: list[WizardSection] = Field(default_factory=list)

    def has_section(self, section_id: str) -> bool:
        """Check whether a section id is already present in this step."""
        return any(section.id == section_id for section in self.sections)
