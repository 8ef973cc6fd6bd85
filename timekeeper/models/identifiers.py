"""Typed employee identifier kinds.

An identifier type is either one of the known ``IdentifierKind`` values or
``OTHER`` together with a mandatory custom label. Free-form strings are
never accepted as a kind.
"""

from typing import Optional

from pydantic import Field, field_validator, model_validator

from timekeeper.models.base import BaseDataModel
from timekeeper.models.enums import IdentifierKind


class IdentifierType(BaseDataModel):
    """Tagged variant describing what an identifier value means.

    Attributes:
        kind: Known identifier kind, or OTHER
        custom_label: Required for OTHER, forbidden otherwise

    Example:
        >>> IdentifierType.of(IdentifierKind.PAYROLL_ID).label
        'PAYROLL_ID'
        >>> IdentifierType.other("locker").label
        'OTHER:locker'
    """

    kind: IdentifierKind = Field(..., description="Identifier kind")
    custom_label: Optional[str] = Field(None, description="Label for OTHER kinds")

    @field_validator("custom_label")
    @classmethod
    def strip_label(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None

    @model_validator(mode="after")
    def validate_custom_label(self) -> "IdentifierType":
        """OTHER carries a non-blank label; known kinds carry none.

        Raises:
            ValueError: If the label does not match the kind
        """
        if self.kind == IdentifierKind.OTHER:
            if not self.custom_label:
                raise ValueError("OTHER identifier types require a custom label")
        elif self.custom_label:
            raise ValueError(f"{self.kind.value} identifiers do not take a custom label")
        return self

    @classmethod
    def of(cls, kind: IdentifierKind) -> "IdentifierType":
        return cls(kind=kind)

    @classmethod
    def other(cls, label: str) -> "IdentifierType":
        return cls(kind=IdentifierKind.OTHER, custom_label=label)

    @property
    def label(self) -> str:
        if self.kind == IdentifierKind.OTHER:
            return f"OTHER:{self.custom_label}"
        return self.kind.value
