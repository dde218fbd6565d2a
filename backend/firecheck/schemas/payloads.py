"""Write Payloads — pydantic models for every create/update operation.

Invariants:
    - Required text fields are stripped and must be non-empty
    - Optional text fields: "" (or whitespace) becomes None before persistence
    - Update payloads only carry their whitelisted fields; unknown keys are ignored
    - An update may omit a required field but may not blank or null it
    - validate_payload maps pydantic errors to core ValidationError (first failing field)

Design Decisions:
    - field_validator for side-effect-free transforms (strip, blank -> None)
    - Patch.to_record() dumps only the fields the caller actually sent, so a patch
      never overwrites an untouched column with a default
"""

from collections.abc import Mapping
from datetime import date
from typing import ClassVar, TypeVar

from pydantic import (
    BaseModel, ConfigDict, Field, ValidationError as SchemaValidationError,
    field_validator, model_validator,
)

from firecheck.core.domain_types import FacilityType, InspectionType
from firecheck.core.errors import ValidationError


def strip_required(v: str | None) -> str | None:
    """Strip a required text field; reject empty or whitespace-only values."""
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("cannot be empty or whitespace")
    return v


def blank_to_none(v: object) -> object:
    if isinstance(v, str):
        return v.strip() or None
    return v


class Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", use_enum_values=True)

    def to_record(self) -> dict:
        return self.model_dump(mode="json")


class Patch(Payload):
    """Partial update — omitted fields stay untouched."""
    required_fields: ClassVar[tuple[str, ...]] = ()

    @model_validator(mode="after")
    def reject_cleared_required(self):
        for name in self.required_fields:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be cleared")
        return self

    def to_record(self) -> dict:
        return self.model_dump(mode="json", include=self.model_fields_set)


# --- Site --------------------------------------------------------------------

class SiteCreate(Payload):
    """Site registration — name and address required."""
    name: str = Field(max_length=255)
    address: str = Field(max_length=500)
    phone: str | None = None
    manager_name: str | None = None
    manager_phone: str | None = None
    manager_email: str | None = None
    approval_date: date | None = None
    notes: str | None = None

    @field_validator("name", "address")
    @classmethod
    def strip_required_text(cls, v: str) -> str:
        return strip_required(v)

    @field_validator(
        "phone", "manager_name", "manager_phone", "manager_email",
        "approval_date", "notes", mode="before",
    )
    @classmethod
    def blank_optional_text(cls, v: object) -> object:
        return blank_to_none(v)


class SiteUpdate(Patch):
    """Site update — every column editable, name/address cannot be blanked."""
    required_fields: ClassVar[tuple[str, ...]] = ("name", "address")

    name: str | None = Field(None, max_length=255)
    address: str | None = Field(None, max_length=500)
    phone: str | None = None
    manager_name: str | None = None
    manager_phone: str | None = None
    manager_email: str | None = None
    approval_date: date | None = None
    notes: str | None = None

    @field_validator("name", "address")
    @classmethod
    def strip_required_text(cls, v: str | None) -> str | None:
        return strip_required(v)

    @field_validator(
        "phone", "manager_name", "manager_phone", "manager_email",
        "approval_date", "notes", mode="before",
    )
    @classmethod
    def blank_optional_text(cls, v: object) -> object:
        return blank_to_none(v)


# --- Inspection --------------------------------------------------------------

class InspectionCreate(Payload):
    """Inspection creation — must reference a site and name an inspector."""
    site_id: str
    inspector: str = Field(max_length=255)
    inspection_type: InspectionType = InspectionType.OPERATIONAL
    notes: str | None = None

    @field_validator("site_id", "inspector")
    @classmethod
    def strip_required_text(cls, v: str) -> str:
        return strip_required(v)

    @field_validator("notes", mode="before")
    @classmethod
    def blank_optional_text(cls, v: object) -> object:
        return blank_to_none(v)


class InspectionUpdate(Patch):
    """Inspection update — inspector, type and notes only."""
    required_fields: ClassVar[tuple[str, ...]] = ("inspector", "inspection_type")

    inspector: str | None = Field(None, max_length=255)
    inspection_type: InspectionType | None = None
    notes: str | None = None

    @field_validator("inspector")
    @classmethod
    def strip_required_text(cls, v: str | None) -> str | None:
        return strip_required(v)

    @field_validator("notes", mode="before")
    @classmethod
    def blank_optional_text(cls, v: object) -> object:
        return blank_to_none(v)


# --- Issue -------------------------------------------------------------------

class IssueCreate(Payload):
    """Issue creation — facility, description and location required."""
    facility_type: FacilityType = FacilityType.FIRE_SUPPRESSION
    description: str = Field(max_length=2000)
    location: str = Field(max_length=500)
    detail_location: str | None = Field(None, max_length=500)

    @field_validator("description", "location")
    @classmethod
    def strip_required_text(cls, v: str) -> str:
        return strip_required(v)

    @field_validator("detail_location", mode="before")
    @classmethod
    def blank_optional_text(cls, v: object) -> object:
        return blank_to_none(v)


class IssueUpdate(Patch):
    """Issue update — same fields as creation, each optional."""
    required_fields: ClassVar[tuple[str, ...]] = (
        "facility_type", "description", "location",
    )

    facility_type: FacilityType | None = None
    description: str | None = Field(None, max_length=2000)
    location: str | None = Field(None, max_length=500)
    detail_location: str | None = Field(None, max_length=500)

    @field_validator("description", "location")
    @classmethod
    def strip_required_text(cls, v: str | None) -> str | None:
        return strip_required(v)

    @field_validator("detail_location", mode="before")
    @classmethod
    def blank_optional_text(cls, v: object) -> object:
        return blank_to_none(v)


# --- Boundary helper ---------------------------------------------------------

PayloadT = TypeVar("PayloadT", bound=Payload)


def validate_payload(
    schema: type[PayloadT], data: Mapping[str, object] | BaseModel,
) -> PayloadT:
    """Validate a raw payload, raising core ValidationError on the first bad field."""
    if isinstance(data, BaseModel):
        data = data.model_dump(exclude_unset=True)
    try:
        return schema.model_validate(dict(data))
    except SchemaValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(loc) for loc in first["loc"]) or "payload"
        raise ValidationError(f"{field}: {first['msg']}", field=field) from e
