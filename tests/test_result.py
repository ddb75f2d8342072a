from __future__ import annotations

import pytest

from compute_firewall import Err, HttpError, Ok
from compute_firewall.result import notify

pytestmark = [pytest.mark.unit]


class TestOk:
    def test_unpack(self):
        op = object()
        assert Ok(op, {"name": "x"}).unpack() == (None, op, {"name": "x"})  # type: ignore[arg-type]

    def test_tuple_unpacking(self):
        err, op, raw = Ok(None, {"a": 1})
        assert err is None
        assert op is None
        assert raw == {"a": 1}

    def test_unwrap_returns_operation(self):
        op = object()
        assert Ok(op, {}).unwrap() is op  # type: ignore[arg-type]


class TestErr:
    def test_unpack(self):
        error = HttpError(status=500, body="boom")
        assert Err(error, {"e": 1}).unpack() == (error, None, {"e": 1})

    def test_operation_is_none(self):
        assert Err(HttpError(status=500, body="boom")).operation is None

    def test_unwrap_raises_original(self):
        error = HttpError(status=404, body="missing")
        with pytest.raises(HttpError) as exc_info:
            Err(error).unwrap()
        assert exc_info.value is error


class TestMatch:
    @pytest.mark.parametrize(
        ("result", "expected"),
        [
            (Ok(None, {"name": "op"}), "ok"),
            (Err(HttpError(status=500, body="x")), "err"),
        ],
    )
    def test_structural_pattern_matching(self, result, expected):
        match result:
            case Ok(raw_response=raw):
                assert raw == {"name": "op"}
                got = "ok"
            case Err(error=HttpError(status=status)):
                assert status == 500
                got = "err"
        assert got == expected


class TestNotify:
    def test_calls_callback_with_three_fields(self):
        seen = []
        result = Ok(None, {"name": "op"})
        assert notify(result, lambda *args: seen.append(args)) is result
        assert seen == [(None, None, {"name": "op"})]

    def test_no_callback(self):
        result = Err(HttpError(status=500, body="x"))
        assert notify(result, None) is result
