"""Tests for taskchain.execution.continuation — ContinuationEngine."""

from __future__ import annotations

import pytest
from structlog.testing import capture_logs

from taskchain.core.errors import DecodeError, HandlerError, PublishError
from taskchain.execution.args import TaskArg
from taskchain.execution.continuation import ContinuationEngine
from taskchain.execution.outcome import Outcome
from taskchain.execution.signature import task_signature


@pytest.fixture
def engine() -> ContinuationEngine:
    return ContinuationEngine()


def chain(**kwargs):
    return task_signature(
        "add",
        [2, 3],
        on_success=[task_signature("log"), task_signature("store", ["archive"])],
        on_error=[task_signature("alert", ["pager"]), task_signature("cleanup")],
        **kwargs,
    )


class TestSuccessContinuations:
    def test_result_prepended_in_order(self, engine):
        out = engine.finalize(chain(), Outcome.success(5))
        assert [s.name for s in out] == ["log", "store"]
        assert out[0].args == (TaskArg("int", 5),)
        assert out[1].args == (TaskArg("int", 5), TaskArg("str", "archive"))

    def test_immutable_publishes_as_declared(self, engine):
        sig = chain(immutable=True)
        out = engine.finalize(sig, Outcome.success(5))
        assert out == list(sig.on_success)

    def test_none_result_prepended_as_null(self, engine):
        out = engine.finalize(chain(), Outcome.success(None))
        assert out[0].args == (TaskArg("null", None),)

    def test_no_continuations(self, engine):
        assert engine.finalize(task_signature("add", [1, 2]), Outcome.success(3)) == []

    def test_templates_not_modified(self, engine):
        sig = chain()
        before = sig.on_success
        engine.finalize(sig, Outcome.success(5))
        assert sig.on_success == before
        assert sig.on_success[0].args == ()

    def test_finalize_twice_gives_equal_independent_lists(self, engine):
        sig = chain()
        first = engine.finalize(sig, Outcome.success({"total": 5}))
        second = engine.finalize(sig, Outcome.success({"total": 5}))
        assert first == second
        assert first[0].args[0].value is not second[0].args[0].value

    def test_continuations_do_not_share_result_containers(self, engine):
        out = engine.finalize(chain(), Outcome.success([1, 2]))
        out[0].args[0].value.append(3)
        assert out[1].args[0].value == [1, 2]

    @pytest.mark.parametrize("immutable", [False, True])
    def test_declared_container_args_not_shared_between_runs(self, engine, immutable):
        sig = task_signature("make", on_success=[task_signature("store", [{"tags": ["a"]}])], immutable=immutable)
        first = engine.finalize(sig, Outcome.success(1))
        second = engine.finalize(sig, Outcome.success(1))

        first[0].args[-1].value["tags"].append("b")

        assert second[0].args[-1].value == {"tags": ["a"]}
        assert sig.on_success[0].args[0].value == {"tags": ["a"]}

    def test_declared_container_args_not_shared_on_error(self, engine):
        sig = task_signature("make", on_error=[task_signature("alert", [["pager", "email"]])])
        first = engine.finalize(sig, Outcome.failure(HandlerError("x")))
        first[0].args[1].value.clear()
        assert engine.finalize(sig, Outcome.failure(HandlerError("x")))[0].args[1].value == ["pager", "email"]

    @pytest.mark.parametrize("result", [{"when": object()}, {1: {2, 3}}, float("nan"), [float("inf")]])
    def test_unencodable_nested_result(self, engine, result):
        with pytest.raises(DecodeError):
            engine.finalize(chain(), Outcome.success(result))

    def test_unencodable_result(self, engine):
        with pytest.raises(DecodeError):
            engine.finalize(chain(), Outcome.success(object()))

    def test_unencodable_result_ignored_when_immutable(self, engine):
        assert len(engine.finalize(chain(immutable=True), Outcome.success(object()))) == 2


class TestErrorContinuations:
    def test_error_prepended(self, engine):
        out = engine.finalize(chain(), Outcome.failure(HandlerError("disk full")))
        assert [s.name for s in out] == ["alert", "cleanup"]
        assert out[0].args == (TaskArg("error", "disk full"), TaskArg("str", "pager"))
        assert out[1].args == (TaskArg("error", "disk full"),)

    def test_immutable_does_not_affect_errors(self, engine):
        out = engine.finalize(chain(immutable=True), Outcome.failure(HandlerError("disk full")))
        assert out[1].args == (TaskArg("error", "disk full"),)

    def test_failure_without_error_continuations(self, engine):
        sig = task_signature("add", on_success=[task_signature("log")])
        assert engine.finalize(sig, Outcome.failure(HandlerError("x"))) == []


class TestPublish:
    def test_publishes_in_order(self, engine, publisher):
        out = engine.finalize(chain(), Outcome.success(5))
        assert engine.publish(out, publisher) == 2
        assert publisher.published == out

    def test_logs_each_publish(self, engine, publisher):
        with capture_logs() as logs:
            engine.publish([task_signature("log", [1])], publisher)
        assert logs == [{"event": "continuation_published", "log_level": "info", "continuation": "log", "args": 1}]

    def test_publish_error_propagates_and_stops(self, engine, make_publisher):
        publisher = make_publisher(fail_on="log", exc=PublishError("queue full"))
        sigs = [task_signature("log"), task_signature("store")]
        with pytest.raises(PublishError, match="queue full"):
            engine.publish(sigs, publisher)
        assert publisher.published == []

    def test_other_exceptions_wrapped(self, engine, make_publisher):
        publisher = make_publisher(fail_on="store", exc=ConnectionError("socket closed"))
        sigs = [task_signature("log"), task_signature("store")]
        with pytest.raises(PublishError) as exc_info:
            engine.publish(sigs, publisher)
        assert isinstance(exc_info.value.cause, ConnectionError)
        assert exc_info.value.context.task_name == "store"
        assert [s.name for s in publisher.published] == ["log"]
