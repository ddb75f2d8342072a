from __future__ import annotations

import pytest

from compute_firewall import (
    Compute,
    HttpError,
    OperationError,
    OperationTimeoutError,
)
from compute_firewall.operation import operation_from_response
from tests.fakes import PROJECT_ID, Call, FakeHttp

pytestmark = [pytest.mark.unit]

OPERATION_PATH = f"/projects/{PROJECT_ID}/global/operations/op-1"


class TestOperation:
    async def test_get_metadata(self, http: FakeHttp, compute: Compute):
        http.handler = lambda _: {"name": "op-1", "status": "RUNNING"}
        op = compute.operation("op-1")

        assert await op.get_metadata() == {"name": "op-1", "status": "RUNNING"}
        assert op.status == "RUNNING"
        assert not op.done
        assert http.calls == [Call("GET", OPERATION_PATH)]

    async def test_wait_polls_until_done(self, http: FakeHttp, compute: Compute):
        statuses = iter(["PENDING", "RUNNING", "DONE"])
        http.handler = lambda _: {"name": "op-1", "status": next(statuses)}
        op = compute.operation("op-1")

        metadata = await op.wait(poll_interval=0)

        assert metadata["status"] == "DONE"
        assert len(http.calls) == 3

    async def test_wait_skips_fetch_when_already_done(self, http: FakeHttp, compute: Compute):
        op = compute.operation("op-1")
        op.metadata = {"name": "op-1", "status": "DONE"}

        await op.wait()

        assert http.calls == []

    async def test_wait_raises_operation_error(self, http: FakeHttp, compute: Compute):
        http.handler = lambda _: {
            "name": "op-1",
            "status": "DONE",
            "error": {"errors": [{"code": "RESOURCE_ALREADY_EXISTS", "message": "exists"}]},
        }
        op = compute.operation("op-1")

        with pytest.raises(OperationError, match="exists") as exc_info:
            await op.wait(poll_interval=0)
        assert exc_info.value.operation is op
        assert exc_info.value.errors[0]["code"] == "RESOURCE_ALREADY_EXISTS"

    async def test_wait_times_out(self, http: FakeHttp, compute: Compute):
        http.handler = lambda _: {"name": "op-1", "status": "RUNNING"}
        op = compute.operation("op-1")

        with pytest.raises(OperationTimeoutError) as exc_info:
            await op.wait(poll_interval=0.01, timeout=0.05)
        assert exc_info.value.operation is op

    async def test_wait_propagates_http_errors(self, http: FakeHttp, compute: Compute):
        http.handler = lambda _: HttpError(status=500, body="boom")
        op = compute.operation("op-1")

        with pytest.raises(HttpError):
            await op.wait(poll_interval=0)
        assert len(http.calls) == 1


class TestOperationFromResponse:
    def test_attaches_response_as_metadata(self, http: FakeHttp, compute: Compute):
        raw = {"name": "op-1", "status": "RUNNING"}

        op = operation_from_response(compute, raw)

        assert op.name == "op-1"
        assert op.metadata is raw
        assert http.calls == []

    @pytest.mark.parametrize("raw", [None, {}, {"status": "DONE"}, ["op-1"]])
    def test_no_operation_name(self, compute: Compute, raw):
        assert operation_from_response(compute, raw) is None
