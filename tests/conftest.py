from __future__ import annotations

from collections import deque
from collections.abc import Callable
from typing import Any

import base64

import pytest

from cdp_protocols.pdf.jsonrpc import CallIdGenerator
from cdp_protocols.pdf.steps import Call

Handler = Callable[[Call], tuple[dict[str, Any], list[dict[str, Any]]]]


class FakeBrowser:
    """Scripted stand-in for a CDP connection.

    `handlers[method](call)` returns `(result, events)`: the response is queued
    first, then the events. `early[method]` events are queued before the
    response. Events inherit the call's sessionId.
    """

    def __init__(self, handlers: dict[str, Handler] | None = None) -> None:
        self.handlers: dict[str, Handler] = dict(handlers or {})
        self.early: dict[str, list[dict[str, Any]]] = {}
        self.calls: list[tuple[Call, Any]] = []
        self.inbox: deque[dict[str, Any]] = deque()
        self.next_call_id = CallIdGenerator()
        self.closed = False

    def on(self, method: str, result: dict[str, Any] | None = None, events: list[dict[str, Any]] | None = None) -> None:
        self.handlers[method] = lambda _call: (dict(result or {}), list(events or []))

    def push(self, msg: dict[str, Any]) -> None:
        self.inbox.append(msg)

    def send_call(self, call: Call, call_id: Any) -> None:
        self.calls.append((call, call_id))
        handler = self.handlers.get(call.method)
        if handler is None:
            return
        result, events = handler(call)
        self._queue_events(self.early.get(call.method, []), call)
        response: dict[str, Any] = {"id": call_id}
        if "error" in result:
            response["error"] = result["error"]
        else:
            response["result"] = result
        if call.session_id is not None:
            response["sessionId"] = call.session_id
        self.inbox.append(response)
        self._queue_events(events, call)

    def _queue_events(self, events: list[dict[str, Any]], call: Call) -> None:
        for event in events:
            msg = dict(event)
            if call.session_id is not None:
                msg.setdefault("sessionId", call.session_id)
            self.inbox.append(msg)

    def recv(self, timeout: float) -> dict[str, Any] | None:  # noqa: ARG002
        if not self.inbox:
            return None
        return self.inbox.popleft()

    def __enter__(self) -> FakeBrowser:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.closed = True

    @property
    def methods(self) -> list[str]:
        return [call.method for call, _ in self.calls]


@pytest.fixture
def browser() -> FakeBrowser:
    return FakeBrowser()


@pytest.fixture
def scripted_page(browser: FakeBrowser) -> FakeBrowser:
    """Script `browser` to answer a full spawn / load / render / close cycle."""
    data = base64.b64encode(b"%PDF-1.7 fake").decode()
    stopped = [{"method": "Page.frameStoppedLoading", "params": {"frameId": "F1"}}]
    browser.on("Target.createBrowserContext", {"browserContextId": "C1"})
    browser.on("Target.createTarget", {"targetId": "T1"})
    browser.on(
        "Target.attachToTarget",
        {"sessionId": "S1"},
        events=[{"method": "Target.attachedToTarget", "params": {"sessionId": "S1"}}],
    )
    browser.on("Page.enable")
    browser.on("Runtime.enable")
    browser.on("Network.emulateNetworkConditions")
    browser.on("Page.navigate", {"frameId": "F1"}, events=stopped)
    browser.on("Page.getFrameTree", {"frameTree": {"frame": {"id": "F1"}}})
    browser.on("Page.setDocumentContent", {}, events=[{"method": "Page.loadEventFired", "params": {}}])
    browser.on("Runtime.evaluate", {"result": {"type": "boolean", "value": True}})
    browser.on("Page.printToPDF", {"data": data})
    browser.on("Page.captureScreenshot", {"data": data})
    browser.on("Page.resetNavigationHistory")
    browser.on("Target.closeTarget", {"success": True})
    browser.on("Target.disposeBrowserContext")
    return browser
