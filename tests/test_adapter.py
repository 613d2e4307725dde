"""Tests for the host adapter: turn execution, ordering and the error boundary."""
import asyncio
import pytest

from channels.adapter import BotAdapter, ERROR_MESSAGE


class TestBotAdapter:
    @pytest.mark.asyncio
    async def test_replies_keep_send_order(self, make_activity):
        async def logic(ctx):
            await ctx.send_activity("one")
            await ctx.send_activity("two")
            await ctx.send_activity("three")

        replies = await BotAdapter().process_activity(make_activity("hi"), logic)
        assert [r.text for r in replies] == ["one", "two", "three"]
        assert all(r.reply_to_id for r in replies)

    @pytest.mark.asyncio
    async def test_default_error_handler_apologises(self, make_activity):
        async def logic(ctx):
            await ctx.send_activity("partial")
            raise RuntimeError("boom")

        adapter = BotAdapter()
        replies = await adapter.process_activity(make_activity("hi"), logic)
        assert [r.text for r in replies] == ["partial", ERROR_MESSAGE]

    @pytest.mark.asyncio
    async def test_custom_error_handler(self, make_activity):
        seen = []

        async def on_error(ctx, error):
            seen.append(error)
            await ctx.send_activity(f"failed: {error}")

        async def logic(ctx):
            raise ValueError("bad input")

        replies = await BotAdapter(on_turn_error=on_error).process_activity(make_activity("hi"), logic)
        assert [r.text for r in replies] == ["failed: bad input"]
        assert isinstance(seen[0], ValueError)

    @pytest.mark.asyncio
    async def test_no_handler_reraises(self, make_activity):
        async def logic(ctx):
            raise KeyError("missing")

        with pytest.raises(KeyError):
            await BotAdapter(on_turn_error=None).process_activity(make_activity("hi"), logic)

    @pytest.mark.asyncio
    async def test_turns_for_one_conversation_do_not_overlap(self, make_activity):
        events = []

        async def logic(ctx):
            events.append(("start", ctx.activity.text))
            await asyncio.sleep(0.01)
            events.append(("end", ctx.activity.text))

        adapter = BotAdapter()
        await asyncio.gather(
            adapter.process_activity(make_activity("a"), logic),
            adapter.process_activity(make_activity("b"), logic),
        )
        assert events[0][0] == "start" and events[1][0] == "end"
        assert events[0][1] == events[1][1]
        assert adapter.turn_count == 2

    @pytest.mark.asyncio
    async def test_different_conversations_run_concurrently(self, make_activity):
        events = []

        async def logic(ctx):
            events.append(("start", ctx.activity.text))
            await asyncio.sleep(0.01)
            events.append(("end", ctx.activity.text))

        adapter = BotAdapter()
        await asyncio.gather(
            adapter.process_activity(make_activity("a", conversation_id="c1"), logic),
            adapter.process_activity(make_activity("b", conversation_id="c2"), logic),
        )
        assert [e[0] for e in events[:2]] == ["start", "start"]

    @pytest.mark.asyncio
    async def test_idle_conversation_locks_are_released(self, make_activity):
        async def logic(ctx):
            await asyncio.sleep(0)

        adapter = BotAdapter()
        await asyncio.gather(*[
            adapter.process_activity(make_activity("hi", conversation_id=f"c{i}"), logic)
            for i in range(50)
        ])
        await adapter.process_activity(make_activity("again", conversation_id="c0"), logic)
        assert adapter._locks == {}
        assert adapter._waiters == {}
        assert adapter.turn_count == 51

    @pytest.mark.asyncio
    async def test_lock_released_after_failed_turn(self, make_activity):
        async def logic(ctx):
            raise RuntimeError("boom")

        adapter = BotAdapter(on_turn_error=None)
        with pytest.raises(RuntimeError):
            await adapter.process_activity(make_activity("hi"), logic)
        assert adapter._locks == {}
