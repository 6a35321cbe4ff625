"""Unit tests for cancellation tokens."""

import asyncio

from .cancellation import CancellationToken


def describe_CancellationToken():
    def it_starts_active():
        token = CancellationToken()
        assert not token.cancelled
        assert token.reason is None
        assert token.source is None

    def it_records_reason_and_source():
        token = CancellationToken()
        token.cancel("user closed dialog")
        assert token.cancelled
        assert token.reason == "user closed dialog"
        assert token.source is token

    def it_only_cancels_once():
        token = CancellationToken()
        token.cancel("first")
        token.cancel("second")
        assert token.reason == "first"

    def describe_listeners():
        def it_notifies_each_listener_once():
            token = CancellationToken()
            calls = []
            token.add_listener(lambda t: calls.append("a"))
            token.add_listener(lambda t: calls.append("b"))

            token.cancel()
            token.cancel()

            assert calls == ["a", "b"]

        def it_fires_immediately_when_already_cancelled():
            token = CancellationToken()
            token.cancel()
            calls = []
            token.add_listener(calls.append)
            assert calls == [token]

        def it_keeps_notifying_after_a_listener_raises():
            token = CancellationToken()
            calls = []

            def broken(t):
                raise RuntimeError("listener bug")

            token.add_listener(broken)
            token.add_listener(lambda t: calls.append("after"))

            token.cancel()

            assert token.cancelled
            assert calls == ["after"]

        def it_still_fires_merged_tokens_after_a_listener_raises():
            a = CancellationToken()

            def broken(t):
                raise RuntimeError("listener bug")

            a.add_listener(broken)
            merged = CancellationToken.merge(a, CancellationToken())

            a.cancel("stop")

            assert merged.cancelled
            assert merged.source is a

        def it_can_remove_a_listener():
            token = CancellationToken()
            calls = []
            remove = token.add_listener(calls.append)
            remove()
            token.cancel()
            assert calls == []

    def describe_merge():
        def it_fires_when_any_input_fires():
            a, b = CancellationToken(), CancellationToken()
            merged = CancellationToken.merge(a, b)
            assert not merged.cancelled

            b.cancel("stop")

            assert merged.cancelled
            assert merged.reason == "stop"
            assert merged.source is b

        def it_keeps_the_first_source():
            a, b = CancellationToken(), CancellationToken()
            merged = CancellationToken.merge(a, b)
            a.cancel("timeout")
            b.cancel("stop")
            assert merged.source is a
            assert merged.reason == "timeout"

        def it_is_cancelled_at_creation_if_an_input_already_is():
            a, b = CancellationToken(), CancellationToken()
            b.cancel("early")
            merged = CancellationToken.merge(a, b)
            assert merged.cancelled
            assert merged.source is b
            # Nothing left attached to the live input
            assert a._listeners == []

        def it_detaches_from_inputs_on_close():
            a, b = CancellationToken(), CancellationToken()
            merged = CancellationToken.merge(a, b)
            merged.close()

            assert a._listeners == []
            assert b._listeners == []
            a.cancel()
            assert not merged.cancelled

        def it_reports_the_original_source_through_nested_merges():
            a, b, c = CancellationToken(), CancellationToken(), CancellationToken()
            inner = CancellationToken.merge(a, b)
            outer = CancellationToken.merge(inner, c)
            a.cancel()
            assert outer.source is a

    def describe_wait():
        def it_resumes_when_cancelled():
            async def scenario():
                token = CancellationToken()
                asyncio.get_running_loop().call_later(0.01, token.cancel)
                await asyncio.wait_for(token.wait(), timeout=1)
                return token.cancelled

            assert asyncio.run(scenario())

        def it_returns_at_once_when_already_cancelled():
            async def scenario():
                token = CancellationToken()
                token.cancel()
                await asyncio.wait_for(token.wait(), timeout=1)

            asyncio.run(scenario())
