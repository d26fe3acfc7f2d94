import asyncio
from realtime import ConnectionRegistry, ReservedSlot
from services.liveness import LivenessMonitor


def test_lost_heartbeat_evicted_within_two_sweeps(make_conn):
    async def _run():
        reg = ConnectionRegistry()
        c = make_conn("acct1", "https://a.com")
        await reg.register("acct1", c)
        monitor = LivenessMonitor(reg, interval=30)
        assert await monitor.sweep() == 0
        c.websocket.drop()
        assert await monitor.sweep() == 0
        assert c.alive is False
        assert await monitor.sweep() == 1
        assert "acct1" not in reg
        assert c.websocket.closed is True
    asyncio.run(_run())


def test_responsive_connection_never_evicted_and_gets_no_frames(make_conn):
    async def _run():
        reg = ConnectionRegistry()
        c = make_conn("acct1", "https://a.com")
        await reg.register("acct1", c)
        monitor = LivenessMonitor(reg, interval=30)
        for _ in range(5):
            assert await monitor.sweep() == 0
            assert c.alive is True
        assert await reg.connections_for("acct1") == [c]
        # heartbeat is native control frames only, never application payloads
        assert c.websocket.sent == []
    asyncio.run(_run())


def test_only_dead_connection_is_evicted(make_conn):
    async def _run():
        reg = ConnectionRegistry()
        live = make_conn("acct1", "https://a.com")
        dead = make_conn("acct1", "https://a.com")
        await reg.register("acct1", live)
        await reg.register("acct1", dead)
        dead.websocket.drop()
        monitor = LivenessMonitor(reg)
        assert await monitor.sweep() == 0
        assert await monitor.sweep() == 1
        assert await reg.connections_for("acct1") == [live]
    asyncio.run(_run())


def test_reserved_slots_are_not_probed_or_evicted():
    async def _run():
        reg = ConnectionRegistry()
        slot = ReservedSlot("acct1", "https://a.com")
        await reg.register("acct1", slot)
        monitor = LivenessMonitor(reg)
        for _ in range(3):
            assert await monitor.sweep() == 0
        assert await reg.connections_for("acct1") == [slot]
    asyncio.run(_run())


def test_start_and_stop_background_task(make_conn):
    async def _run():
        reg = ConnectionRegistry()
        c = make_conn("acct1", "https://a.com")
        c.websocket.drop()
        await reg.register("acct1", c)
        monitor = LivenessMonitor(reg, interval=0.01)
        monitor.start()
        for _ in range(100):
            if "acct1" not in reg:
                break
            await asyncio.sleep(0.01)
        await monitor.stop()
        assert "acct1" not in reg
    asyncio.run(_run())
