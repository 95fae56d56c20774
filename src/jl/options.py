"""Validated run configuration."""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from jl.core.color import ColorMode
from jl.core.models import Level, Schema
from jl.core.parsing import NonJsonMode
from jl.core.render import LoggerFormat, RenderOptions
from jl.core.template import DEFAULT_TEMPLATE, FormatToken
from jl.core.timestamps import TimestampStyle

DEFAULT_FOLLOW_INTERVAL_MS = 200

ExtraColor = Literal["black", "red", "green", "yellow", "blue", "magenta", "cyan", "white"]


class RunOptions(BaseModel):
    """Everything one rendering run needs, as parsed from the command line."""

    model_config = ConfigDict(frozen=True)

    format: str = Field(default=DEFAULT_TEMPLATE, description="Output template with {field} placeholders.")
    add_fields: frozenset[str] = Field(
        default_factory=frozenset, description="Extra fields to append (comma-separated)."
    )
    omit_fields: frozenset[str] = Field(
        default_factory=frozenset, description="Extra fields never appended (comma-separated)."
    )
    color: ColorMode = Field(default=ColorMode.AUTO, description="When to emit ANSI styling.")
    non_json: NonJsonMode = Field(default=NonJsonMode.PRINT_AS_IS, description="Policy for non-JSON lines.")
    schema_choice: Schema | None = Field(default=None, description="Forced schema; None auto-detects.")
    logger_format: LoggerFormat = Field(default=LoggerFormat.SHORT_DOTS)
    logger_length: int = Field(default=30, ge=0, description="Max logger width; 0 means unlimited.")
    ts_format: TimestampStyle = Field(default=TimestampStyle.TIME)
    min_level: Level | None = Field(default=None, description="Drop records below this level.")
    raw_json: bool = False
    expanded: bool = False
    key_color: ExtraColor = "magenta"
    value_color: ExtraColor = "cyan"
    tz: str = Field(default="local", description="local, utc, or an IANA zone name.")
    follow: bool = False
    follow_interval_ms: int | None = Field(default=None, ge=1)
    output: Path | None = None
    files: tuple[Path, ...] = ()

    @field_validator("add_fields", "omit_fields", mode="before")
    @classmethod
    def _split_fields(cls, v: Any) -> Any:
        if v is None:
            return frozenset()
        if isinstance(v, str):
            v = v.split(",")
        if isinstance(v, Iterable):
            return frozenset(part.strip() for part in v if isinstance(part, str) and part.strip())
        return v

    @field_validator("schema_choice", mode="before")
    @classmethod
    def _auto_schema(cls, v: Any) -> Any:
        if isinstance(v, str) and v.strip().lower() == "auto":
            return None
        return v

    @field_validator("min_level", mode="before")
    @classmethod
    def _parse_min_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return Level.from_name(v)
        return v

    @field_validator("key_color", "value_color", mode="before")
    @classmethod
    def _lower_color(cls, v: Any) -> Any:
        return v.lower() if isinstance(v, str) else v

    def render_options(self, tokens: Iterable[FormatToken]) -> RenderOptions:
        return RenderOptions.for_template(
            tokens,
            logger_format=self.logger_format,
            logger_length=self.logger_length,
            expanded=self.expanded,
            raw_json=self.raw_json,
            add_fields=self.add_fields,
            omit_fields=self.omit_fields,
        )


def resolve_follow_interval_ms(value: int | None) -> int:
    """Explicit value, else JL_FOLLOW_INTERVAL_MS, else the default."""
    if value is not None:
        if value < 1:
            raise ValueError("follow interval must be >= 1 ms")
        return value

    env = os.getenv("JL_FOLLOW_INTERVAL_MS")
    if env:
        try:
            parsed = int(env)
        except ValueError as exc:
            raise ValueError("JL_FOLLOW_INTERVAL_MS must be an integer") from exc
        if parsed < 1:
            raise ValueError("JL_FOLLOW_INTERVAL_MS must be >= 1")
        return parsed

    return DEFAULT_FOLLOW_INTERVAL_MS
