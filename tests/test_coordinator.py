import asyncio

import pytest
from conftest import NOW, FakeHost, RecordingSurface, ScriptedProvider, fixed_clock, make_snapshot

from usage_meter.meter.coordinator import (
    RefreshCoordinator,
    RefreshState,
    RefreshTrigger,
    format_error,
    format_updated,
)
from usage_meter.meter.renderer import Renderer
from usage_meter.meter.store import SnapshotStore
from usage_meter.usage.models import FIVE_HOUR, UsageProviderError


def _coordinator(provider, surface=None, host=None, store=None):
    surface = surface or RecordingSurface()
    store = store or SnapshotStore()
    renderer = Renderer(surface, store, clock=fixed_clock())
    return RefreshCoordinator(
        provider=provider,
        store=store,
        renderer=renderer,
        surface=surface,
        host=host,
        width=340,
        wall_clock=fixed_clock(NOW),
    )


def test_status_text_helpers():
    assert format_updated(NOW) == f"Updated {NOW:%X}"
    assert format_error(RuntimeError("boom")) == "Error: boom"
    assert format_error(RuntimeError("")) == "Error: RuntimeError"


@pytest.mark.asyncio
class TestRefreshSuccess:
    async def test_stores_renders_and_stamps(self, snapshot):
        surface = RecordingSurface()
        host = FakeHost(height=287)
        coordinator = _coordinator(ScriptedProvider(snapshot), surface=surface, host=host)

        state = await coordinator.refresh(RefreshTrigger.STARTUP)

        assert state is RefreshState.IDLE
        assert coordinator.store.current is snapshot
        assert coordinator.store.updated_at == NOW
        assert coordinator.last_updated == NOW
        assert surface.windows[FIVE_HOUR].percent_label == "42% used"
        assert surface.status == format_updated(NOW)
        assert surface.status_error is False
        assert host.resizes == [(340, 287)]

    async def test_busy_toggles_around_fetch(self, snapshot):
        surface = RecordingSurface()
        await _coordinator(ScriptedProvider(snapshot), surface=surface).refresh()

        assert surface.busy_history == [True, False]
        assert surface.calls[0] == ("set_busy", True)
        assert surface.calls[-1] == ("set_busy", False)

    async def test_without_host_skips_resize(self, snapshot):
        coordinator = _coordinator(ScriptedProvider(snapshot))
        assert await coordinator.refresh() is RefreshState.IDLE

    async def test_resize_failure_is_not_a_refresh_failure(self, snapshot):
        surface = RecordingSurface()
        coordinator = _coordinator(ScriptedProvider(snapshot), surface=surface, host=FakeHost(fail=True))

        state = await coordinator.refresh()

        assert state is RefreshState.IDLE
        assert coordinator.store.current is snapshot
        assert surface.status_error is False
        assert surface.busy is False


@pytest.mark.asyncio
class TestSingleFlight:
    async def test_back_to_back_triggers_share_one_call(self, snapshot):
        provider = ScriptedProvider(snapshot, gated=True)
        coordinator = _coordinator(provider)

        first = coordinator.request_refresh(RefreshTrigger.STARTUP)
        await asyncio.sleep(0)
        second = coordinator.request_refresh(RefreshTrigger.MANUAL)
        await asyncio.sleep(0)

        assert first is second
        assert provider.calls == 1
        assert coordinator.in_flight
        assert coordinator.has_pending

        provider.release()
        await coordinator.wait_idle()

        assert provider.calls == 2
        assert provider.max_in_flight == 1
        assert not coordinator.has_pending
        assert coordinator.state is RefreshState.IDLE

    async def test_burst_coalesces_into_one_rerun(self, snapshot):
        provider = ScriptedProvider(snapshot, gated=True)
        coordinator = _coordinator(provider)

        coordinator.request_refresh(RefreshTrigger.STARTUP)
        await asyncio.sleep(0)
        for _ in range(5):
            coordinator.request_refresh(RefreshTrigger.PUSHED)

        provider.release()
        await coordinator.wait_idle()

        assert provider.calls == 2
        assert provider.max_in_flight == 1

    async def test_trigger_after_completion_starts_fresh(self, snapshot):
        provider = ScriptedProvider(snapshot)
        coordinator = _coordinator(provider)

        await coordinator.refresh()
        assert not coordinator.in_flight
        await coordinator.refresh()

        assert provider.calls == 2

    async def test_state_is_refreshing_while_in_flight(self, snapshot):
        provider = ScriptedProvider(snapshot, gated=True)
        coordinator = _coordinator(provider)

        coordinator.request_refresh()
        await asyncio.sleep(0)
        assert coordinator.state is RefreshState.REFRESHING

        provider.release()
        await coordinator.wait_idle()
        assert coordinator.state is RefreshState.IDLE


@pytest.mark.asyncio
class TestFailureIsolation:
    async def test_failure_keeps_last_good_snapshot(self, snapshot):
        surface = RecordingSurface()
        provider = ScriptedProvider(snapshot, UsageProviderError("boom"))
        coordinator = _coordinator(provider, surface=surface)

        await coordinator.refresh()
        rendered = surface.slot_values()

        state = await coordinator.refresh()

        assert state is RefreshState.ERROR
        assert coordinator.store.current is snapshot
        assert coordinator.store.updated_at == NOW
        assert surface.slot_values() == rendered
        assert surface.status == "Error: boom"
        assert surface.status_error is True
        assert coordinator.last_error == "Error: boom"
        assert surface.busy is False

    async def test_first_refresh_failure_leaves_store_empty(self):
        surface = RecordingSurface()
        coordinator = _coordinator(ScriptedProvider(OSError("disk gone")), surface=surface)

        assert await coordinator.refresh() is RefreshState.ERROR
        assert coordinator.store.is_empty
        assert surface.windows == {}
        assert surface.status == "Error: disk gone"

    async def test_recovers_on_next_trigger(self, snapshot):
        surface = RecordingSurface()
        provider = ScriptedProvider(UsageProviderError("offline"), snapshot)
        coordinator = _coordinator(provider, surface=surface)

        assert await coordinator.refresh() is RefreshState.ERROR
        assert await coordinator.refresh() is RefreshState.IDLE
        assert coordinator.last_error is None
        assert surface.status_error is False

    async def test_non_snapshot_result_is_an_error(self):
        coordinator = _coordinator(ScriptedProvider(None))

        assert await coordinator.refresh() is RefreshState.ERROR
        assert coordinator.store.is_empty
        assert coordinator.last_error == "Error: Usage provider returned no data"

    async def test_unrenderable_snapshot_never_reaches_store(self, snapshot):
        bad = make_snapshot(five_hour_reset="not a timestamp")
        coordinator = _coordinator(ScriptedProvider(snapshot, bad))

        await coordinator.refresh()
        assert await coordinator.refresh() is RefreshState.ERROR
        assert coordinator.store.current is snapshot

    async def test_failure_in_queued_rerun_is_isolated(self, snapshot):
        surface = RecordingSurface()
        provider = ScriptedProvider(snapshot, UsageProviderError("second failed"), gated=True)
        coordinator = _coordinator(provider, surface=surface)

        coordinator.request_refresh(RefreshTrigger.STARTUP)
        await asyncio.sleep(0)
        coordinator.request_refresh(RefreshTrigger.PUSHED)
        provider.release()
        await coordinator.wait_idle()

        assert provider.calls == 2
        assert coordinator.state is RefreshState.ERROR
        assert coordinator.store.current is snapshot
        assert surface.busy_history == [True, False, True, False]
