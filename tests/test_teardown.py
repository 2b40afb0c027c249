import asyncio
import logging

from portal_client.teardown import SessionTeardown


class SlowSignOut:
    def __init__(self, error: Exception | None = None):
        self.calls = 0
        self.error = error
        self.release = asyncio.Event()

    async def __call__(self):
        self.calls += 1
        await self.release.wait()
        if self.error is not None:
            raise self.error


def test_concurrent_triggers_sign_out_once():
    async def scenario():
        sign_out = SlowSignOut()
        teardown = SessionTeardown(sign_out)
        outcomes = [teardown.trigger() for _ in range(4)]
        await asyncio.sleep(0)
        assert teardown.in_flight
        sign_out.release.set()
        await teardown.wait()
        return sign_out, teardown, outcomes

    sign_out, teardown, outcomes = asyncio.run(scenario())

    assert outcomes == [True, False, False, False]
    assert sign_out.calls == 1
    assert not teardown.in_flight


def test_flag_resets_after_sign_out_settles():
    async def scenario():
        sign_out = SlowSignOut()
        sign_out.release.set()
        teardown = SessionTeardown(sign_out)
        teardown.trigger()
        await teardown.wait()
        teardown.trigger()
        await teardown.wait()
        return sign_out

    assert asyncio.run(scenario()).calls == 2


def test_same_epoch_is_not_torn_down_twice():
    async def scenario():
        sign_out = SlowSignOut()
        sign_out.release.set()
        teardown = SessionTeardown(sign_out)
        first = teardown.trigger(epoch=3)
        await teardown.wait()
        repeat = teardown.trigger(epoch=3)
        later = teardown.trigger(epoch=4)
        await teardown.wait()
        return sign_out, first, repeat, later

    sign_out, first, repeat, later = asyncio.run(scenario())

    assert (first, repeat, later) == (True, False, True)
    assert sign_out.calls == 2


def test_sign_out_errors_are_logged_and_swallowed(caplog):
    async def scenario():
        sign_out = SlowSignOut(error=RuntimeError("idp unreachable"))
        sign_out.release.set()
        teardown = SessionTeardown(sign_out)
        teardown.trigger()
        await teardown.wait()
        return teardown

    with caplog.at_level(logging.ERROR, logger="portal_client.teardown"):
        teardown = asyncio.run(scenario())

    assert "Sign-out failed" in caplog.text
    assert "idp unreachable" in caplog.text
    assert not teardown.in_flight


def test_wait_without_teardown_returns_immediately():
    teardown = SessionTeardown(SlowSignOut())

    asyncio.run(teardown.wait())

    assert teardown.sign_out_count == 0
