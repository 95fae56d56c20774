from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest


@pytest.fixture
def write_lines() -> Callable[[Path, list[str]], Path]:
    def _write(path: Path, lines: list[str]) -> Path:
        path.write_text("".join(line + "\n" for line in lines), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def leveled_lines() -> list[str]:
    return [
        '{"@timestamp":"2024-01-15T10:30:00Z","level":"DEBUG","logger_name":"app","message":"debug msg"}',
        '{"@timestamp":"2024-01-15T10:30:01Z","level":"INFO","logger_name":"app","message":"info msg"}',
        '{"@timestamp":"2024-01-15T10:30:02Z","level":"WARN","logger_name":"app","message":"warn msg"}',
        '{"@timestamp":"2024-01-15T10:30:03Z","level":"ERROR","logger_name":"app","message":"error msg"}',
        '{"@timestamp":"2024-01-15T10:30:04Z","logger_name":"app","message":"no level msg"}',
    ]


@pytest.fixture
def logstash_line() -> str:
    return (
        '{"@timestamp":"2024-01-15T10:30:00Z","level":"INFO",'
        '"logger_name":"com.example.App","message":"hello"}'
    )


@pytest.fixture
def bunyan_line() -> str:
    return '{"level":30,"time":"2024-01-15T10:30:00Z","name":"myapp","msg":"started","v":0}'
