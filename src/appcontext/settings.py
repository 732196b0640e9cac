"""Settings controlling how value paths are interpreted."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

__all__ = ["ContextSettings", "VALUE_PATH_SEPARATOR"]


VALUE_PATH_SEPARATOR = "."


class ContextSettings(BaseModel):
    """Configuration for an :class:`~appcontext.context.AppContext`.

    Attributes:
        path_separator: Delimiter between the segments of a value path.
        case_sensitive_paths: When False (the default), paths are lower-cased
            before they are interpreted, so ``"Db.Host"`` and ``"db.host"``
            address the same value.
    """

    model_config = ConfigDict(frozen=True)

    path_separator: str = Field(default=VALUE_PATH_SEPARATOR, min_length=1)
    case_sensitive_paths: bool = False

    @field_validator("path_separator")
    @classmethod
    def validate_path_separator(cls, v: str) -> str:
        if any(c.isspace() for c in v):
            raise ValueError("path_separator must not contain whitespace")
        return v
