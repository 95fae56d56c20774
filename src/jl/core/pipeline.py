"""Pipeline driver: line -> JSON -> record -> level filter -> rendered line.

Schema detection happens once per run, on the first decoded JSON object, and
the resulting mapping is kept in an explicit RunState owned by the Pipeline.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import tzinfo
from typing import TYPE_CHECKING, Any, TextIO

from .color import ColorConfig, resolve_color
from .models import FieldMapping, Level, Schema
from .parsing import NonJsonMode, parse_line
from .record import extract_record
from .render import RenderOptions, render
from .schema import field_mapping, resolve_schema
from .sinks import FileSink, LineSink, StreamSink
from .sources import DEFAULT_POLL_INTERVAL, FileSource, FollowReader, LineSource, StdinSource
from .template import FormatToken, compile_template
from .timestamps import TimestampStyle, resolve_timezone

if TYPE_CHECKING:
    from jl.options import RunOptions

LOGGER = logging.getLogger(__name__)


@dataclass
class RunState:
    """Run-scoped state: the schema is written once, then only read."""

    schema: Schema | None = None
    mapping: FieldMapping | None = None
    line_no: int = 0


class Pipeline:
    def __init__(
        self,
        *,
        tokens: tuple[FormatToken, ...],
        color: ColorConfig,
        render_options: RenderOptions,
        tz: tzinfo | None,
        ts_style: TimestampStyle = TimestampStyle.TIME,
        non_json: NonJsonMode = NonJsonMode.PRINT_AS_IS,
        schema_choice: Schema | None = None,
        min_level: Level | None = None,
    ) -> None:
        self.tokens = tokens
        self.color = color
        self.render_options = render_options
        self.tz = tz
        self.ts_style = ts_style
        self.non_json = non_json
        self.schema_choice = schema_choice
        self.min_level = min_level
        self.state = RunState()

    @classmethod
    def from_options(cls, options: RunOptions, *, is_terminal: bool) -> Pipeline:
        """Build a pipeline; raises InvalidTimezoneError before any input is read."""
        tokens = compile_template(options.format)
        return cls(
            tokens=tokens,
            color=resolve_color(
                options.color,
                is_terminal,
                key_color=options.key_color,
                value_color=options.value_color,
            ),
            render_options=options.render_options(tokens),
            tz=resolve_timezone(options.tz),
            ts_style=options.ts_format,
            non_json=options.non_json,
            schema_choice=options.schema_choice,
            min_level=options.min_level,
        )

    def mapping_for(self, value: Any) -> FieldMapping:
        if self.state.mapping is not None:
            return self.state.mapping
        if not isinstance(value, dict):
            # Detection waits for the first object.
            return field_mapping(self.schema_choice or Schema.GENERIC)
        schema = resolve_schema(self.schema_choice, value)
        self.state.schema = schema
        self.state.mapping = field_mapping(schema)
        return self.state.mapping

    def process_line(self, line: str) -> str | None:
        """Return the text to emit for one input line, or None to emit nothing."""
        self.state.line_no += 1
        parsed = parse_line(line, self.non_json, line_no=self.state.line_no)
        if not parsed.is_json:
            return parsed.text

        record = extract_record(parsed.value, self.mapping_for(parsed.value), self.tz, self.ts_style)
        if self.min_level is not None and record.level is not None and record.level < self.min_level:
            return None
        return render(record, self.tokens, self.color, self.render_options)

    def process_source(self, source: LineSource, sink: LineSink) -> int:
        """Drain a source into a sink; returns the number of lines emitted."""
        emitted = 0
        while (line := source.next_line()) is not None:
            out = self.process_line(line)
            if out is not None:
                sink.write_line(out)
                emitted += 1
        return emitted


def run(
    options: RunOptions,
    *,
    stdin: TextIO,
    stdout: TextIO,
    is_terminal: bool = False,
    follow_interval: float = DEFAULT_POLL_INTERVAL,
) -> int:
    """Process every configured input as one logical stream."""
    pipeline = Pipeline.from_options(options, is_terminal=is_terminal)
    sink: LineSink = FileSink(options.output) if options.output else StreamSink(stdout)
    emitted = 0
    try:
        if not options.files:
            if options.follow:
                LOGGER.warning("--follow has no effect when reading stdin")
            emitted += pipeline.process_source(StdinSource(stdin), sink)
            return emitted

        last = len(options.files) - 1
        for i, path in enumerate(options.files):
            source: LineSource
            if options.follow and i == last:
                source = FollowReader(path, poll_interval=follow_interval)
            else:
                source = FileSource(path)
            try:
                emitted += pipeline.process_source(source, sink)
            finally:
                source.close()
        return emitted
    finally:
        sink.close()
