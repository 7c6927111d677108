import asyncio
import threading

import pytest

from typedhttp import CancellationToken, CancellationTokenSource, RequestCancelledError
from typedhttp._utils import run_cancellable


class TestCancellationTokenSource:
    def test_cancel_sets_reason_to_name(self):
        source = CancellationTokenSource(name="caller")

        source.cancel()

        assert source.token.is_cancellation_requested
        assert source.reason == "caller"
        assert source.token.reason == "caller"

    def test_callbacks_run_once(self):
        source = CancellationTokenSource()
        calls = []
        source.token.register(lambda token: calls.append(token.reason))

        source.cancel()
        source.cancel()

        assert calls == ["external"]

    def test_register_after_cancel_runs_immediately(self):
        source = CancellationTokenSource()
        source.cancel()
        calls = []

        source.token.register(lambda token: calls.append(token))

        assert calls == [source.token]

    def test_disposed_registration_is_not_called(self):
        source = CancellationTokenSource()
        calls = []
        registration = source.token.register(lambda token: calls.append(token))

        registration.dispose()
        registration.dispose()
        source.cancel()

        assert calls == []

    def test_cancel_after_close_is_a_no_op(self):
        source = CancellationTokenSource()

        source.close()
        source.close()
        source.cancel()

        assert source.closed
        assert not source.token.is_cancellation_requested

    def test_none_token(self):
        token = CancellationToken.NONE

        assert not token.can_be_cancelled
        assert not token.is_cancellation_requested
        token.raise_if_cancellation_requested()
        token.register(lambda _: None).dispose()

    def test_raise_if_cancellation_requested(self):
        source = CancellationTokenSource(name="service")
        source.cancel()

        with pytest.raises(RequestCancelledError) as exc_info:
            source.token.raise_if_cancellation_requested()

        assert exc_info.value.source == "service"
        assert str(exc_info.value) == "Request was cancelled by service"

    def test_concurrent_cancel_fires_once(self):
        source = CancellationTokenSource()
        calls = []
        source.token.register(lambda token: calls.append(token))
        threads = [threading.Thread(target=source.cancel) for _ in range(8)]

        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(calls) == 1


class TestLinkedSource:
    def test_first_source_to_fire_wins(self):
        request = CancellationTokenSource(name="request")
        caller = CancellationTokenSource(name="caller")
        linked = CancellationTokenSource.linked(request.token, caller.token, None)

        caller.cancel()
        request.cancel()

        assert linked.token.is_cancellation_requested
        assert linked.reason == "caller"

    def test_linked_to_cancelled_token(self):
        service = CancellationTokenSource(name="service")
        service.cancel()

        linked = CancellationTokenSource.linked(service.token)

        assert linked.reason == "service"

    def test_own_cancel_uses_own_name(self):
        parent = CancellationTokenSource()
        linked = CancellationTokenSource.linked(parent.token, name="linked")

        linked.cancel()

        assert linked.reason == "linked"
        assert not parent.token.is_cancellation_requested

    def test_close_unlinks_parents(self):
        parent = CancellationTokenSource()
        linked = CancellationTokenSource.linked(parent.token)

        linked.close()
        parent.cancel()

        assert not linked.token.is_cancellation_requested
        assert parent._callbacks == []

    def test_never_cancelling_tokens_are_skipped(self):
        linked = CancellationTokenSource.linked(CancellationToken.NONE, None)

        linked.cancel()

        assert linked.reason == "linked"


class TestRunCancellable:
    @pytest.mark.asyncio
    async def test_returns_result(self):
        source = CancellationTokenSource()

        async def compute() -> int:
            await asyncio.sleep(0)
            return 42

        assert await run_cancellable(compute(), source.token) == 42

    @pytest.mark.asyncio
    async def test_without_cancellable_token(self):
        async def compute() -> str:
            return "ok"

        assert await run_cancellable(compute(), CancellationToken.NONE) == "ok"

    @pytest.mark.asyncio
    async def test_cancellation_interrupts_operation(self):
        source = CancellationTokenSource(name="caller")
        started = asyncio.Event()
        interrupted = asyncio.Event()

        async def hang() -> None:
            started.set()
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                interrupted.set()
                raise

        call = asyncio.ensure_future(run_cancellable(hang(), source.token))
        await started.wait()
        source.cancel()

        with pytest.raises(RequestCancelledError) as exc_info:
            await call

        assert exc_info.value.source == "caller"
        assert interrupted.is_set()

    @pytest.mark.asyncio
    async def test_already_cancelled_token(self):
        source = CancellationTokenSource()
        source.cancel()
        started = []

        async def compute() -> None:
            started.append(True)

        with pytest.raises(RequestCancelledError):
            await run_cancellable(compute(), source.token)

        assert started == []

    @pytest.mark.asyncio
    async def test_cancellation_wins_over_completion(self):
        source = CancellationTokenSource()

        async def compute_then_cancel() -> int:
            source.cancel()
            return 1

        with pytest.raises(RequestCancelledError):
            await run_cancellable(compute_then_cancel(), source.token)

    @pytest.mark.asyncio
    async def test_operation_errors_propagate(self):
        source = CancellationTokenSource()

        async def fail() -> None:
            raise LookupError("boom")

        with pytest.raises(LookupError, match="boom"):
            await run_cancellable(fail(), source.token)

    @pytest.mark.asyncio
    async def test_wait_wakes_on_cancel_from_thread(self):
        source = CancellationTokenSource()
        waiter = asyncio.ensure_future(source.token.wait())
        await asyncio.sleep(0)

        await asyncio.to_thread(source.cancel)
        await asyncio.wait_for(waiter, timeout=5)

        assert source.token.is_cancellation_requested
