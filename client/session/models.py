"""
Character creation form.

The form is checked locally before anything is sent: required fields,
enumerated values and password confirmation. The password confirmation
never leaves the client.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from ..error_types import ErrorMessages
from ..exceptions import CharacterValidationError, create_error_context
from ..logging_config import get_logger

logger = get_logger(__name__)

# Passwords are sent exactly as typed; every other text field is trimmed
TrimmedStr = Annotated[str, StringConstraints(strip_whitespace=True)]


class PasswordMismatchError(ValueError):
    """Raised inside the model when password and confirmation differ."""


class CharacterCreationForm(BaseModel):
    """Fields collected by the character creation screen."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: TrimmedStr = Field(..., min_length=1, max_length=50, description="Character name")
    password: str = Field(..., min_length=1, description="Account password")
    confirm_password: str = Field(..., min_length=1, alias="confirmPassword", description="Password confirmation")
    email: TrimmedStr | None = Field(None, description="Contact email")
    age: int | None = Field(None, ge=0, description="Character age")
    sex: Literal["male", "female"] = Field(..., description="Character sex")
    title: TrimmedStr | None = None
    reputation: Literal["famous", "infamous"] | None = None
    profession: TrimmedStr | None = None
    description: TrimmedStr | None = None

    @field_validator("email", "title", "profession", "description", "reputation", "age", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        """Treat empty optional inputs as not provided."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def passwords_match(self) -> "CharacterCreationForm":
        if self.password != self.confirm_password:
            raise PasswordMismatchError(ErrorMessages.PASSWORD_MISMATCH)
        return self

    def to_payload(self) -> dict[str, Any]:
        """Wire payload for createNewCharacter, without the confirmation."""
        payload: dict[str, Any] = {
            "playerName": self.name,
            "password": self.password,
            "sex": self.sex,
        }
        optional = {
            "email": self.email,
            "age": self.age,
            "title": self.title,
            "reputation": self.reputation,
            "profession": self.profession,
            "description": self.description,
        }
        payload.update({key: value for key, value in optional.items() if value is not None})
        return payload


def _field_name(loc: tuple[Any, ...]) -> str:
    """Map a pydantic error location back to the form's own field names."""
    if not loc:
        return "confirmPassword"
    name = str(loc[0])
    field = CharacterCreationForm.model_fields.get(name)
    if field is not None and field.alias:
        return field.alias
    return name


def validate_character_form(data: dict[str, Any]) -> CharacterCreationForm:
    """
    Validate raw form input.

    Raises:
        CharacterValidationError: With the names of missing and invalid fields
    """
    try:
        return CharacterCreationForm.model_validate(data)
    except PydanticValidationError as e:
        missing: list[str] = []
        invalid: list[str] = []
        for error in e.errors():
            name = _field_name(tuple(error.get("loc", ())))
            bucket = missing if error.get("type") in {"missing", "string_too_short"} else invalid
            if name not in bucket:
                bucket.append(name)

        if missing:
            user_message = ErrorMessages.MISSING_FIELDS.format(fields=", ".join(missing))
        elif invalid == ["confirmPassword"]:
            user_message = ErrorMessages.PASSWORD_MISMATCH
        else:
            user_message = ErrorMessages.INVALID_FIELDS.format(fields=", ".join(invalid))

        raise CharacterValidationError(
            f"Character creation form failed validation: missing={missing} invalid={invalid}",
            context=create_error_context(player_name=str(data.get("name") or "") or None),
            missing_fields=missing,
            invalid_fields=invalid,
            user_friendly=user_message,
        ) from e
