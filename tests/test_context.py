import pytest

from authsome_otp.context import CallContext, ensure_context
from authsome_otp.errors import Cancelled


def test_background_context_never_cancels():
    ctx = CallContext.background()

    ctx.check()
    assert not ctx.cancelled


def test_cancelled_context_raises():
    ctx = CallContext()
    ctx.cancel()

    with pytest.raises(Cancelled):
        ctx.check()


def test_elapsed_deadline_raises():
    ctx = CallContext(timeout=0)

    assert ctx.timed_out
    with pytest.raises(Cancelled):
        ctx.check()


def test_ensure_context_keeps_given_context():
    ctx = CallContext(timeout=10)

    assert ensure_context(ctx) is ctx
    assert isinstance(ensure_context(None), CallContext)
