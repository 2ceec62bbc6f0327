import asyncio
import json

import pytest

from badge import DueTasksState
from omnifocus_api import ScriptExecutionError
from streamdeck.models import ActionSettings
from streamdeck.plugin import OmniFocusPlugin

from .fakes import FakeBridge, FakeTransport

ACTION = "com.omnifocus.streamdeck.counts"


def _message(event, context="ctx1", **payload):
    body = {"event": event, "action": ACTION, "context": context, "device": "dev1"}
    if payload:
        body["payload"] = payload
    return json.dumps(body)


async def _settle(rounds=5):
    for _ in range(rounds):
        await asyncio.sleep(0.02)


@pytest.fixture()
def harness(config, make_query):
    def _make(bridge):
        transport = FakeTransport()
        plugin = OmniFocusPlugin(make_query(bridge), transport, config)
        return plugin, transport

    return _make


@pytest.mark.asyncio
async def test_will_appear_polls_and_sends_badge(harness):
    plugin, transport = harness(FakeBridge(counts={"today_count": [3]}))

    plugin.dispatch(_message("willAppear", settings={"badgeCount": "todayCount"}))
    await _settle()

    assert transport.events("setState", "ctx1") == [{"event": "setState", "payload": {"state": 1}}]
    assert transport.events("setTitle", "ctx1")[0]["payload"]["title"] == "3"
    await plugin.shutdown()


@pytest.mark.asyncio
@pytest.mark.parametrize("count, state", [(0, DueTasksState.NONE), (3, DueTasksState.SHORT), (12, DueTasksState.LONG)])
async def test_refresh_scenarios(harness, count, state):
    plugin, transport = harness(FakeBridge(counts={"overdue_count": [count]}))
    instance = plugin.registry.add("ctx1", ACTION, ActionSettings())
    instance.handle = plugin.query.setup_script("overdue_count")

    assert await plugin.refresh(instance) is state
    assert transport.events("setState", "ctx1")[-1]["payload"]["state"] == int(state)


@pytest.mark.asyncio
async def test_automation_failure_shows_none(harness):
    plugin, transport = harness(FakeBridge(counts={"overdue_count": [ScriptExecutionError("timed out")]}))
    instance = plugin.registry.add("ctx1", ACTION, ActionSettings())
    instance.handle = plugin.query.setup_script("overdue_count")

    assert await plugin.refresh(instance) is DueTasksState.NONE
    assert transport.events("setTitle", "ctx1")[-1]["payload"]["title"] == ""


@pytest.mark.asyncio
async def test_context_removed_mid_query_gets_nothing(harness):
    bridge = FakeBridge(counts={"overdue_count": [7]})
    bridge.gate.clear()
    plugin, transport = harness(bridge)
    instance = plugin.registry.add("ctx1", ACTION, ActionSettings())
    instance.handle = plugin.query.setup_script("overdue_count")

    pending = asyncio.create_task(plugin.refresh(instance))
    await asyncio.sleep(0.05)
    plugin.unregister("ctx1")
    bridge.gate.set()

    assert await pending is None
    assert transport.sent == []


@pytest.mark.asyncio
async def test_reconfigured_context_discards_old_result(harness):
    bridge = FakeBridge(counts={"overdue_count": [7]})
    bridge.gate.clear()
    plugin, transport = harness(bridge)
    old = plugin.registry.add("ctx1", ACTION, ActionSettings())
    old.handle = plugin.query.setup_script("overdue_count")

    pending = asyncio.create_task(plugin.refresh(old))
    await asyncio.sleep(0.05)
    plugin.registry.add("ctx1", ACTION, ActionSettings())
    bridge.gate.set()

    assert await pending is None
    assert transport.sent == []


@pytest.mark.asyncio
async def test_reregister_mid_query_waits_for_running_call(harness):
    bridge = FakeBridge(counts={"overdue_count": [1], "flagged_count": [8]})
    bridge.gate.clear()
    plugin, transport = harness(bridge)

    plugin.register("a", ACTION, ActionSettings())
    await asyncio.sleep(0.05)
    plugin.unregister("a")
    plugin.register("b", ACTION, ActionSettings.model_validate({"badgeCount": "flaggedCount"}))
    await asyncio.sleep(0.05)
    # "b" queues behind the abandoned call for "a"
    assert bridge.calls == ["overdue_count"]

    bridge.gate.set()
    await _settle()

    assert bridge.max_active == 1
    assert bridge.calls == ["overdue_count", "flagged_count"]
    assert transport.events("setState", "a") == []
    assert transport.events("setState", "b")[-1]["payload"]["state"] == int(DueTasksState.LONG)
    await plugin.shutdown()


@pytest.mark.asyncio
async def test_overlapping_refresh_is_dropped(harness):
    bridge = FakeBridge(counts={"overdue_count": [2]})
    bridge.gate.clear()
    plugin, transport = harness(bridge)
    instance = plugin.registry.add("ctx1", ACTION, ActionSettings())
    instance.handle = plugin.query.setup_script("overdue_count")

    first = asyncio.create_task(plugin.refresh(instance))
    await asyncio.sleep(0.05)
    assert await plugin.refresh(instance) is None
    bridge.gate.set()

    assert await first is DueTasksState.SHORT
    assert bridge.calls == ["overdue_count"]
    assert len(transport.events("setState")) == 1


@pytest.mark.asyncio
async def test_will_disappear_stops_polling(harness):
    bridge = FakeBridge(counts={"overdue_count": [1]})
    plugin, transport = harness(bridge)

    plugin.dispatch(_message("willAppear"))
    await _settle()
    plugin.dispatch(_message("willDisappear"))
    await _settle()

    assert plugin.registry.get("ctx1") is None
    assert bridge.calls == ["overdue_count"]
    await plugin.shutdown()


@pytest.mark.asyncio
async def test_unavailable_script_alerts_and_does_not_poll(harness):
    bridge = FakeBridge(unavailable={"flagged_count"})
    plugin, transport = harness(bridge)

    plugin.dispatch(_message("willAppear", settings={"badgeCount": "flaggedCount"}))
    await _settle()

    assert transport.events("showAlert", "ctx1") == [{"event": "showAlert"}]
    assert transport.events("setState", "ctx1")[0]["payload"]["state"] == 0
    assert plugin.registry.get("ctx1").unavailable is True
    assert bridge.calls == []

    # new settings pointing at an available script recover the button
    plugin.dispatch(_message("didReceiveSettings", settings={"badgeCount": "overdueCount"}))
    await _settle()
    assert plugin.registry.get("ctx1").unavailable is False
    assert bridge.calls == ["overdue_count"]
    await plugin.shutdown()


@pytest.mark.asyncio
async def test_settings_change_switches_source(harness):
    bridge = FakeBridge(counts={"overdue_count": [1], "flagged_count": [8]})
    plugin, transport = harness(bridge)

    plugin.dispatch(_message("willAppear"))
    await _settle()
    plugin.dispatch(_message("didReceiveSettings", settings={"badgeCount": "flaggedCount"}))
    await _settle()

    assert bridge.calls == ["overdue_count", "flagged_count"]
    assert transport.events("setState", "ctx1")[-1]["payload"]["state"] == int(DueTasksState.LONG)
    assert plugin.registry.get("ctx1").action == ACTION
    await plugin.shutdown()


@pytest.mark.asyncio
async def test_send_to_plugin_returns_perspectives(harness):
    plugin, transport = harness(FakeBridge(perspectives=[["Inbox", "Forecast"]]))
    plugin.dispatch(_message("willAppear"))
    plugin.dispatch(_message("sendToPlugin", eventType="getPerspectives"))
    await _settle()

    (reply,) = transport.events("sendToPropertyInspector", "ctx1")
    assert reply["action"] == ACTION
    assert reply["payload"] == {"eventType": "getPerspectives", "perspectives": ["Inbox", "Forecast"]}
    await plugin.shutdown()


@pytest.mark.asyncio
async def test_property_inspector_appearing_sends_perspectives(harness):
    plugin, transport = harness(FakeBridge(perspectives=[ScriptExecutionError("not running")]))
    plugin.dispatch(_message("willAppear"))
    plugin.dispatch(_message("propertyInspectorDidAppear"))
    await _settle()

    (reply,) = transport.events("sendToPropertyInspector", "ctx1")
    assert reply["payload"]["perspectives"] == []
    await plugin.shutdown()


@pytest.mark.asyncio
async def test_other_send_to_plugin_payloads_are_ignored(harness):
    plugin, transport = harness(FakeBridge())
    plugin.dispatch(_message("willAppear"))
    plugin.dispatch(_message("sendToPlugin", eventType="somethingElse"))
    await _settle()

    assert transport.events("sendToPropertyInspector") == []
    await plugin.shutdown()


@pytest.mark.asyncio
async def test_key_down_opens_perspective_and_refreshes(harness):
    bridge = FakeBridge(counts={"overdue_count": [4]})
    plugin, transport = harness(bridge)
    plugin.dispatch(_message("willAppear", settings={"perspective": "Forecast", "customPerspective": "Errands"}))
    await _settle()

    plugin.dispatch(_message("keyDown"))
    await _settle()

    assert transport.events("openUrl") == [
        {"event": "openUrl", "payload": {"url": "omnifocus:///perspective/Errands"}}
    ]
    assert bridge.calls == ["overdue_count", "overdue_count"]
    await plugin.shutdown()


@pytest.mark.asyncio
async def test_system_wake_refreshes_every_button(harness):
    bridge = FakeBridge(counts={"overdue_count": [1], "today_count": [2]})
    plugin, transport = harness(bridge)
    plugin.dispatch(_message("willAppear", context="a"))
    plugin.dispatch(_message("willAppear", context="b", settings={"badgeCount": "todayCount"}))
    await _settle()

    plugin.dispatch(json.dumps({"event": "systemDidWakeUp"}))
    await _settle()

    assert sorted(bridge.calls) == ["overdue_count", "overdue_count", "today_count", "today_count"]
    await plugin.shutdown()


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", ["not json", "[]", json.dumps({"context": "ctx1"}), json.dumps({"event": "deviceDidConnect"})])
async def test_invalid_or_unknown_messages_are_ignored(harness, raw):
    plugin, transport = harness(FakeBridge())
    plugin.dispatch(raw)
    await _settle(1)
    assert transport.sent == []
    assert len(plugin.registry) == 0


@pytest.mark.asyncio
async def test_shutdown_cancels_polling(harness):
    plugin, transport = harness(FakeBridge())
    plugin.dispatch(_message("willAppear", context="a"))
    plugin.dispatch(_message("willAppear", context="b"))
    await _settle()

    await plugin.shutdown()

    assert len(plugin.registry) == 0
    assert plugin._background == set()
