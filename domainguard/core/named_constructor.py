"""Named Constructors - validated, one-shot paths from untrusted input to entities.

Invariants:
    - validate_input never returns a partially validated object
    - Every pydantic failure is reported per field; nothing is dropped
    - A ValidationPolicy is always explicit: input models refuse to validate without one
    - Non-mapping input is rejected before pydantic sees it (field "__root__")

Design Decisions:
    - Pydantic models describe the SHAPE of each creation scenario; the frozen
      policy dataclass carries the LIMITS and reaches validators through
      validation context, so one model serves any configured policy
    - pydantic.ValidationError is translated at this seam: callers only ever
      see domainguard.core.errors.ValidationError
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TypeVar

from pydantic import BaseModel, ConfigDict, ValidationInfo
from pydantic import ValidationError as PydanticValidationError

from domainguard.core.errors import ValidationError

ROOT_FIELD = "__root__"

P = TypeVar("P", bound="ValidationPolicy")
M = TypeVar("M", bound="PolicyModel")


@dataclass(frozen=True)
class ValidationPolicy:
    """Base for per-scenario validation limits."""


class PolicyModel(BaseModel):
    """Input model whose validators read limits from the active policy."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    @staticmethod
    def active_policy(info: ValidationInfo, expected: type[P]) -> P:
        policy = (info.context or {}).get("policy")
        if not isinstance(policy, expected):
            raise ValueError(f"{expected.__name__} required to validate this input")
        return policy


def validate_input(model: type[M], raw: object, policy: ValidationPolicy) -> M:
    """Validate untrusted input against model + policy, or raise ValidationError."""
    if not isinstance(raw, Mapping):
        raise ValidationError(
            {ROOT_FIELD: [f"expected a mapping, got {type(raw).__name__}"]},
        )
    try:
        return model.model_validate(dict(raw), context={"policy": policy})
    except PydanticValidationError as exc:
        raise ValidationError(field_errors(exc)) from None


def field_errors(exc: PydanticValidationError) -> dict[str, list[str]]:
    """Group pydantic errors by dotted field location, preserving order."""
    grouped: dict[str, list[str]] = {}
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or ROOT_FIELD
        message = error["msg"].removeprefix("Value error, ")
        grouped.setdefault(location, []).append(message)
    return grouped
