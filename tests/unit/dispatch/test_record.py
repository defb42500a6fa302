"""
Unit tests for log record creation
"""

import pytest

from treelog.core import levels
from treelog.dispatch.record import (
    LogRecord,
    create_log_record,
    format_message,
    parse_log_args,
)


class Unprintable:
    """Object whose string conversion fails"""

    def __str__(self):
        raise RuntimeError("cannot render")

    __repr__ = __str__


class TestParseLogArgs:
    """Argument shapes of the logging methods"""

    def test_plain_message(self):
        assert parse_log_args(("hello",), {}) == ("hello", (), None)

    def test_format_and_args(self):
        assert parse_log_args(("%s=%d", "a", 1), {}) == ("%s=%d", ("a", 1), None)

    def test_leading_context(self):
        fmt, args, context = parse_log_args(({"user": "ada"}, "login %s", "ok"), {})
        assert fmt == "login %s"
        assert args == ("ok",)
        assert context == {"user": "ada"}

    def test_context_only_uses_msg(self):
        fmt, args, context = parse_log_args(({"msg": "started", "pid": 7},), {})
        assert fmt == "started"
        assert args == ()
        assert context == {"msg": "started", "pid": 7}

    def test_keyword_context_merges(self):
        _, _, context = parse_log_args(({"a": 1}, "m"), {"b": 2})
        assert context == {"a": 1, "b": 2}

    def test_non_string_message(self):
        assert parse_log_args((42,), {})[0] == "42"

    def test_leading_context_is_copied(self):
        original = {"user": "ada"}
        _, _, context = parse_log_args((original, "m"), {"extra": 1})
        assert original == {"user": "ada"}
        assert context is not original

    def test_unprintable_message_object(self):
        fmt, _, _ = parse_log_args((Unprintable(),), {})
        assert fmt == "<Unprintable> [FORMAT ERROR: cannot render]"

    def test_unprintable_context_msg(self):
        fmt, _, context = parse_log_args(({"msg": Unprintable()},), {})
        assert fmt.startswith("<Unprintable> [FORMAT ERROR: ")
        assert "msg" in context


class TestFormatMessage:
    """Percent formatting without raising"""

    def test_formats(self):
        assert format_message("%s + %s", (1, 2)) == "1 + 2"

    def test_no_args_keeps_percent(self):
        assert format_message("100% done", ()) == "100% done"

    @pytest.mark.parametrize("fmt, args", [("%d", ("x",)), ("%s %s", ("only",)), ("%(k)s", (1,))])
    def test_format_error(self, fmt, args):
        result = format_message(fmt, args)
        assert result.startswith(f"{fmt} [FORMAT ERROR: ")
        assert result.endswith("]")

    def test_argument_conversion_error(self):
        result = format_message("value %s", (Unprintable(),))
        assert result == "value %s [FORMAT ERROR: cannot render]"


class TestLogRecord:
    """Immutable records"""

    def test_create_log_record(self):
        record = create_log_record("app.db", levels.INFO, "x=%d", (3,), filename="f.py", lineno=9)

        assert record.message == "x=3"
        assert record.level_name == "INFO"
        assert record.source_logger_name == "app.db"
        assert record.logger_name == "app.db"
        assert record.presented_message is None
        assert record.filename == "f.py"
        assert record.lineno == 9
        assert record.timestamp > 0

    def test_frozen(self):
        record = create_log_record("app", levels.INFO, "m")
        with pytest.raises(Exception):
            record.message = "changed"

    def test_evolve_leaves_original(self):
        record = create_log_record("app", levels.INFO, "m")
        changed = record.evolve(logger_name="parent")

        assert changed.logger_name == "parent"
        assert record.logger_name == "app"
        assert changed.source_logger_name == "app"

    def test_copy_owns_its_maps(self):
        record = LogRecord(level_no=20, level_name="INFO", message_fmt="m", context={"a": 1})
        copied = record.copy()
        copied.extra["k"] = "v"
        copied.context["a"] = 2

        assert record.extra == {}
        assert record.context == {"a": 1}

    def test_to_dict_merges_extra_without_override(self):
        record = create_log_record("app", levels.INFO, "m").evolve(
            extra={"request_id": "r1", "message": "ignored"}
        )
        data = record.to_dict()

        assert data["request_id"] == "r1"
        assert data["message"] == "m"
