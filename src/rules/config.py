from __future__ import annotations

from pathlib import Path
from typing import Any

import tomllib
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

CONFIG_FILENAME = "annotate.toml"


class _StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class DirectivesConfig(_StrictModel):
    """Call names recognized as visibility directives."""

    constant: list[str] = Field(
        default_factory=lambda: ["private_constant"],
        description="Calls that make constants private",
    )
    method: list[str] = Field(
        default_factory=lambda: ["private"],
        description="Calls that make instance methods private",
    )
    class_method: list[str] = Field(
        default_factory=lambda: ["private_class_method"],
        description="Calls that make class-level methods private",
    )

    @field_validator("constant", "method", "class_method")
    @classmethod
    def validate_call_names(cls, v: list[str]) -> list[str]:
        for name in v:
            if not name.isidentifier():
                msg = f"Directive call name '{name}' is not a valid identifier"
                raise ValueError(msg)
        return v

    @model_validator(mode="after")
    def validate_disjoint(self) -> DirectivesConfig:
        seen: dict[str, str] = {}
        for kind in ("constant", "method", "class_method"):
            for name in getattr(self, kind):
                if name in seen and seen[name] != kind:
                    msg = (
                        f"Directive call name '{name}' is used for both "
                        f"'{seen[name]}' and '{kind}'"
                    )
                    raise ValueError(msg)
                seen[name] = kind
        return self


class SuppressionsConfig(_StrictModel):
    """Configuration for inline rule-suppression tracking."""

    enabled: bool = Field(
        default=False,
        description="Track suppression markers and build the suppression report",
    )
    marker_prefix: str = Field(
        default="annotate",
        min_length=1,
        description="Prefix of marker comments (e.g. '# annotate: disable=Rule')",
    )
    rules: list[str] = Field(
        default_factory=list,
        description="Known rule ids (empty = accept any rule id)",
    )


class VisibilityConfig(_StrictModel):
    """Configuration for visibility resolution."""

    track_changes: bool = Field(
        default=False,
        description="Record every visibility change applied during a run",
    )


class AnnotateConfig(_StrictModel):
    """Configuration for an annotation resolution run."""

    include: list[str] = Field(
        default_factory=list,
        description="Glob patterns for files to include (empty = all Python files)",
    )
    exclude: list[str] = Field(
        default_factory=list,
        description="Glob patterns for files to exclude",
    )
    nested_gitignore: bool = Field(
        default=False,
        description=(
            "Enable nested .gitignore composition (default: false for root-only)"
        ),
    )
    workers: int = Field(
        default=4,
        ge=1,
        description="Number of source units processed in parallel",
    )
    directives: DirectivesConfig = Field(
        default_factory=DirectivesConfig,
        description="Visibility directive call names",
    )
    suppressions: SuppressionsConfig = Field(
        default_factory=SuppressionsConfig,
        description="Inline suppression tracking",
    )
    visibility: VisibilityConfig = Field(
        default_factory=VisibilityConfig,
        description="Visibility resolution options",
    )


class ConfigError(Exception):
    """Raised when config file exists but cannot be parsed."""


def load_config(root: Path, overrides: dict[str, Any] | None = None) -> AnnotateConfig:
    """Load configuration from annotate.toml if it exists.

    ``overrides`` are merged over the file contents one table deep, so
    ``{"suppressions": {"enabled": True}}`` keeps the file's marker prefix.
    """
    config_path = Path(root) / CONFIG_FILENAME

    data: dict[str, Any] = {}
    if config_path.is_file():
        try:
            with config_path.open("rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {config_path}: {e}"
            raise ConfigError(msg) from e
        except OSError as e:
            msg = f"Cannot read {config_path}: {e}"
            raise ConfigError(msg) from e

    for key, value in (overrides or {}).items():
        if isinstance(value, dict) and isinstance(data.get(key), dict):
            data[key] = {**data[key], **value}
        else:
            data[key] = value

    try:
        return AnnotateConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e
