"""Tests for stepkit.core.result — Ok / Failed outcomes and capture()."""

import pytest
import structlog

from stepkit import Context, Failure
from stepkit.core.result import Failed, Ok, capture, outcome_of


class TestOk:
    def test_inspection(self):
        ctx = Context.build()
        ok = Ok(ctx)
        assert ok.is_ok() is True
        assert ok.is_failed() is False
        assert ok.unwrap() is ctx

    def test_to_dict(self):
        assert Ok(Context.build(error=None)).to_dict() == {"ok": True, "context": {"error": None}}

    def test_frozen(self):
        ok = Ok(Context.build())
        with pytest.raises(AttributeError):
            ok.context = Context.build()


class TestFailed:
    def test_inspection(self):
        failed = Failed(Context.build())
        assert failed.is_ok() is False
        assert failed.is_failed() is True

    def test_unwrap_reraises_original_signal(self):
        ctx = Context.build()
        with pytest.raises(Failure) as exc_info:
            ctx.fail(error="x")
        failed = Failed(ctx, exc_info.value)
        with pytest.raises(Failure) as again:
            failed.unwrap()
        assert again.value is exc_info.value

    def test_unwrap_without_signal_raises_new_failure(self):
        ctx = Context.build()
        with pytest.raises(Failure) as exc_info:
            Failed(ctx).unwrap()
        assert exc_info.value.context is ctx

    def test_to_dict(self):
        assert Failed(Context.build(error="e")).to_dict() == {"ok": False, "context": {"error": "e"}}


class TestCapture:
    def test_normal_return_is_ok(self):
        ctx = Context.build()
        outcome = capture(ctx, lambda: None)
        assert isinstance(outcome, Ok)
        assert outcome.context is ctx

    def test_failure_becomes_failed(self):
        ctx = Context.build()
        outcome = capture(ctx, ctx.fail, error="boom")
        assert isinstance(outcome, Failed)
        assert outcome.context.error == "boom"
        assert outcome.signal.context is ctx

    def test_foreign_failure_is_reraised(self):
        mine = Context.build()
        other = Context.build()
        with pytest.raises(Failure) as exc_info:
            capture(mine, other.fail)
        assert exc_info.value.context is other
        assert mine.success

    def test_other_exceptions_propagate(self):
        ctx = Context.build()

        def broken():
            raise RuntimeError("bug")

        with pytest.raises(RuntimeError):
            capture(ctx, broken)

    def test_record_type_bound_while_running(self):
        ctx = Context.build()
        seen = []
        capture(ctx, lambda: seen.append(structlog.contextvars.get_contextvars()))
        assert seen == [{"record_type": "Context"}]
        assert structlog.contextvars.get_contextvars() == {}

    def test_record_type_unbound_after_failure(self):
        ctx = Context.build()
        capture(ctx, ctx.fail)
        assert structlog.contextvars.get_contextvars() == {}

    def test_already_failed_context_reports_failed(self):
        ctx = Context.build()
        with pytest.raises(Failure):
            ctx.fail()
        assert capture(ctx, lambda: None).is_failed()


class TestOutcomeOf:
    def test_success(self):
        assert outcome_of(Context.build()).is_ok()

    def test_failure(self):
        ctx = Context.build()
        with pytest.raises(Failure):
            ctx.fail()
        assert outcome_of(ctx).is_failed()
