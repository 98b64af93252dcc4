"""Document type reference data models."""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class NoExpiry(BaseModel):
    """Document never time-expires once approved."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["none"] = "none"


class FixedDays(BaseModel):
    """Document is valid for a fixed number of days after valid_from."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["fixed_days"] = "fixed_days"
    days: int = Field(..., gt=0)


class EndOfYear(BaseModel):
    """Document is valid until December 31 of the year it became valid."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["end_of_year"] = "end_of_year"


ValidityStrategy = Annotated[NoExpiry | FixedDays | EndOfYear, Field(discriminator="kind")]


class DocumentType(BaseModel):
    """Catalog entry for a document type.

    Immutable reference data; created at deploy time and never mutated.
    """

    model_config = ConfigDict(frozen=True)

    code: str = Field(..., min_length=1)
    label: str
    validity: ValidityStrategy = Field(default_factory=NoExpiry)
