from __future__ import annotations

from jl.core.models import Schema
from jl.core.schema import SCHEMA_PRIORITY, detect_schema, field_mapping, resolve_schema, score_schemas


def test_detect_logstash() -> None:
    obj = {
        "@timestamp": "2024-01-15T10:30:00Z",
        "level": "INFO",
        "logger_name": "com.example.App",
        "message": "hello",
    }
    assert detect_schema(obj) is Schema.LOGSTASH


def test_detect_logrus() -> None:
    obj = {"level": "info", "msg": "server started", "time": "2024-01-15T10:30:00Z", "component": "http"}
    assert detect_schema(obj) is Schema.LOGRUS


def test_detect_bunyan() -> None:
    obj = {
        "v": 0,
        "level": 30,
        "name": "myapp",
        "hostname": "server1",
        "pid": 1234,
        "time": "2024-01-15T10:30:00.000Z",
        "msg": "request completed",
    }
    assert detect_schema(obj) is Schema.BUNYAN


def test_bunyan_bonus_needs_numeric_level_and_v() -> None:
    assert detect_schema({"v": 0, "level": 30, "msg": "hello"}) is Schema.BUNYAN
    scores = score_schemas({"v": 0, "level": "info", "msg": "hello"})
    assert scores[Schema.BUNYAN] == 3


def test_logstash_timestamp_bonus() -> None:
    obj = {"@timestamp": "2024-01-15T10:30:00Z", "level": "INFO", "message": "x"}
    assert score_schemas(obj)[Schema.LOGSTASH] == 5
    assert detect_schema(obj) is Schema.LOGSTASH


def test_tie_breaks_by_fixed_priority() -> None:
    # msg + time score 2 for both Logrus and Bunyan.
    obj = {"msg": "hello", "time": "2024-01-15T10:30:00Z"}
    scores = score_schemas(obj)
    assert scores[Schema.LOGRUS] == scores[Schema.BUNYAN] == 2
    assert detect_schema(obj) is Schema.LOGRUS
    assert SCHEMA_PRIORITY == (Schema.LOGSTASH, Schema.LOGRUS, Schema.BUNYAN)


def test_level_only_resolves_to_logstash() -> None:
    assert detect_schema({"level": "info"}) is Schema.LOGSTASH


def test_no_signature_fields_is_generic() -> None:
    assert detect_schema({"severity": "info", "text": "hi"}) is Schema.GENERIC
    assert detect_schema({}) is Schema.GENERIC


def test_non_object_is_generic() -> None:
    assert detect_schema([1, 2]) is Schema.GENERIC
    assert detect_schema("text") is Schema.GENERIC


def test_forced_schema_bypasses_detection() -> None:
    obj = {"@timestamp": "2024-01-15T10:30:00Z", "message": "x"}
    assert resolve_schema(Schema.BUNYAN, obj) is Schema.BUNYAN
    assert resolve_schema(None, obj) is Schema.LOGSTASH


def test_field_mapping_is_a_pure_lookup() -> None:
    assert field_mapping(Schema.BUNYAN) is field_mapping(Schema.BUNYAN)
    assert field_mapping(Schema.LOGSTASH).timestamp == ("@timestamp",)
    assert field_mapping(Schema.GENERIC).message[0] == "message"
