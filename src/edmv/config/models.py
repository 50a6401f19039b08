"""Configuration models describing edmv settings."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class EdmvBaseModel(BaseModel):
    """Shared configuration for edmv Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class EditorSettings(EdmvBaseModel):
    """Editor session options.

    Attributes:
        command: Editor command; falls back to `$VISUAL`/`$EDITOR` when unset.
        extension: Suffix for the temporary listing file, used by editors for syntax modes.
    """

    command: Optional[str] = None
    extension: str = ".txt"


class RenameOptions(EdmvBaseModel):
    """Defaults for rename runs.

    Attributes:
        force: Whether existing destinations may be overwritten.
        resolve: Whether rename cycles are staged through temporary names.
        include_hidden: Whether dot-entries are listed when no paths are given.
    """

    force: bool = False
    resolve: bool = False
    include_hidden: bool = False


class StagingOptions(EdmvBaseModel):
    """Temporary name generation used to break rename cycles.

    Attributes:
        prefix: Leading text of every temporary name.
        token_length: Initial length of the unique token.
        max_token_length: Longest token tried before giving up.
        attempts: Candidates tried at each token length.
    """

    prefix: str = ".edmv-"
    token_length: int = Field(default=8, ge=1)
    max_token_length: int = Field(default=32, ge=1)
    attempts: int = Field(default=16, ge=1)

    @model_validator(mode="after")
    def _check_lengths(self) -> "StagingOptions":
        if self.max_token_length < self.token_length:
            raise ValueError("max_token_length must be at least token_length")
        if not self.prefix or "/" in self.prefix:
            raise ValueError("prefix must be a non-empty file name fragment")
        return self


class LoggingSettings(EdmvBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


class CLIOptions(EdmvBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
    """

    quiet_default: bool = False
    summary_default: bool = False


class EdmvConfig(EdmvBaseModel):
    """Top-level configuration struct for edmv.

    Attributes:
        editor: Editor session settings.
        rename: Rename run defaults.
        staging: Temporary name generation settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    editor: EditorSettings = Field(default_factory=EditorSettings)
    rename: RenameOptions = Field(default_factory=RenameOptions)
    staging: StagingOptions = Field(default_factory=StagingOptions)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "EdmvBaseModel",
    "EditorSettings",
    "RenameOptions",
    "StagingOptions",
    "LoggingSettings",
    "CLIOptions",
    "EdmvConfig",
]
