from __future__ import annotations

import io
import json
import threading
from pathlib import Path

import pytest

from jl.core.errors import InvalidTimezoneError, NonJsonLineError
from jl.core.models import Schema
from jl.core.pipeline import Pipeline, run
from jl.core.sinks import StreamSink
from jl.core.sources import FollowReader
from jl.options import RunOptions


def _options(**kwargs) -> RunOptions:
    kwargs.setdefault("color", "never")
    kwargs.setdefault("tz", "utc")
    return RunOptions(**kwargs)


def _pipeline(**kwargs) -> Pipeline:
    return Pipeline.from_options(_options(**kwargs), is_terminal=False)


def _run(lines: list[str], **kwargs) -> str:
    out = io.StringIO()
    stdin = io.StringIO("".join(line + "\n" for line in lines))
    run(_options(**kwargs), stdin=stdin, stdout=out)
    return out.getvalue()


def test_end_to_end_logstash_with_color(logstash_line: str) -> None:
    out = _run([logstash_line], color="always")
    assert out.endswith("\n")
    line = out.rstrip("\n")
    assert line.startswith("10:30:00.000 ")
    assert "\x1b[32mINFO\x1b[0m" in line
    assert "[c.e.App]" in line
    assert line.endswith(" hello")


def test_end_to_end_bunyan_numeric_level(bunyan_line: str) -> None:
    pipeline = _pipeline()
    assert pipeline.process_line(bunyan_line) == "10:30:00.000 INFO [myapp] started"
    assert pipeline.state.schema is Schema.BUNYAN


def test_schema_detected_once_per_run(bunyan_line: str) -> None:
    other = '{"@timestamp":"2024-01-15T10:30:00Z","level":"ERROR","logger_name":"x","message":"logstash msg"}'
    pipeline = _pipeline()
    pipeline.process_line(bunyan_line)
    out = pipeline.process_line(other)
    assert pipeline.state.schema is Schema.BUNYAN
    assert out is not None
    assert "logstash msg" not in out
    assert "ERROR" in out


def test_pipelines_do_not_share_schema_state(bunyan_line: str, logstash_line: str) -> None:
    first = _pipeline()
    second = _pipeline()
    first.process_line(bunyan_line)
    second.process_line(logstash_line)
    assert first.state.schema is Schema.BUNYAN
    assert second.state.schema is Schema.LOGSTASH


def test_detection_waits_for_first_object(logstash_line: str) -> None:
    pipeline = _pipeline()
    assert pipeline.process_line("[1, 2]") == "  [] [1,2]"
    assert pipeline.state.schema is None
    pipeline.process_line(logstash_line)
    assert pipeline.state.schema is Schema.LOGSTASH


def test_forced_schema() -> None:
    line = '{"level":"info","msg":"logrus message","time":"2024-01-15T10:30:00Z","component":"web"}'
    out = _run([line], schema_choice="logrus")
    assert "INFO [web] logrus message" in out


def test_min_level_filter(leveled_lines: list[str]) -> None:
    out = _run(leveled_lines, min_level="warn")
    assert "debug msg" not in out
    assert "info msg" not in out
    assert "warn msg" in out
    assert "error msg" in out
    assert "no level msg" in out


def test_non_json_policies(logstash_line: str) -> None:
    lines = ["plain text line", logstash_line]
    assert "plain text line" in _run(lines, non_json="print-as-is")
    skipped = _run(lines, non_json="skip")
    assert "plain text line" not in skipped
    assert skipped.count("\n") == 1
    with pytest.raises(NonJsonLineError):
        _run(lines, non_json="fail")


def test_raw_json_mode_round_trips(logstash_line: str) -> None:
    out = _run([logstash_line], raw_json=True)
    assert json.loads(out) == json.loads(logstash_line)


def test_invalid_timezone_is_fatal_before_reading(logstash_line: str) -> None:
    stdin = io.StringIO(logstash_line + "\n")
    with pytest.raises(InvalidTimezoneError):
        run(_options(tz="Mars/Olympus"), stdin=stdin, stdout=io.StringIO())
    assert stdin.tell() == 0


def test_files_processed_in_order_as_one_stream(tmp_path: Path, write_lines, bunyan_line: str) -> None:
    first = write_lines(tmp_path / "a.log", [bunyan_line])
    logstash = '{"@timestamp":"2024-01-15T10:31:00Z","level":"WARN","logger_name":"x","message":"second file"}'
    second = write_lines(tmp_path / "b.log", [logstash])
    out = io.StringIO()
    emitted = run(_options(files=[first, second]), stdin=io.StringIO(), stdout=out)
    lines = out.getvalue().splitlines()
    assert emitted == 2
    assert "started" in lines[0]
    # Still read with the Bunyan mapping detected from the first file.
    assert "second file" not in lines[1]
    assert "WARN" in lines[1]


def test_output_file(tmp_path: Path, logstash_line: str) -> None:
    target = tmp_path / "out.txt"
    stdout = io.StringIO()
    run(_options(output=target), stdin=io.StringIO(logstash_line + "\n"), stdout=stdout)
    assert stdout.getvalue() == ""
    assert "hello" in target.read_text(encoding="utf-8")


def test_process_source_with_follow_reader(tmp_path: Path, logstash_line: str, bunyan_line: str) -> None:
    path = tmp_path / "live.log"
    path.write_text(logstash_line + "\n", encoding="utf-8")
    reader = FollowReader(path, poll_interval=0.01)
    pipeline = _pipeline()
    out = io.StringIO()

    def _append_then_cancel() -> None:
        with path.open("a", encoding="utf-8") as f:
            f.write(bunyan_line + "\n")
        threading.Timer(0.1, reader.cancel).start()

    timer = threading.Timer(0.05, _append_then_cancel)
    timer.start()
    try:
        emitted = pipeline.process_source(reader, StreamSink(out))
    finally:
        timer.join()
        reader.close()
    assert emitted == 2
    assert "hello" in out.getvalue()
