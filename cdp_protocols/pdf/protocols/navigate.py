"""Load content into a session's page.

Options:
- `source_type`: "url" (with `url`) or "html" (with `html`)
- `set_cookie`: `Network.setCookie` params, applied before loading
- `evaluate`: `{"expression": ...}` run after load; a thrown exception fails the protocol
- `wait_for`: `{"selector": ..., "attribute": ...}` poll until the element carries the attribute
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from ..builder import ProtocolBuilder
from ..params import fetch_path, lookup_path
from ..steps import Error, State

_WAIT_FOR_JS = """
new Promise((resolve) => {
  const selector = %s;
  const attribute = %s;
  const ready = () => {
    const el = document.querySelector(selector);
    return el !== null && el.hasAttribute(attribute);
  };
  if (ready()) { resolve(true); return; }
  const observer = new MutationObserver(() => {
    if (ready()) { observer.disconnect(); resolve(true); }
  });
  observer.observe(document.documentElement, {attributes: true, childList: true, subtree: true});
})
"""


def _cookie_params(state: State) -> dict[str, Any]:
    cookie = dict(fetch_path(state, ["set_cookie"]))
    if "url" not in cookie and "domain" not in cookie and state.get("source_type") == "url":
        cookie["url"] = fetch_path(state, ["url"])
    return cookie


def _navigated(state: State, msg: Mapping[str, Any]) -> Error | None:
    if "error" in msg:
        return Error({"kind": "navigation_failed", "url": state.get("url"), "error": msg["error"]})
    error_text = lookup_path(msg, ["result", "errorText"])
    if error_text:
        return Error({"kind": "navigation_failed", "url": state.get("url"), "error_text": error_text})
    return None


def _evaluate_params(state: State) -> dict[str, Any]:
    evaluate = fetch_path(state, ["evaluate"])
    if isinstance(evaluate, str):
        return {"expression": evaluate}
    return dict(evaluate)


def _evaluated(state: State, msg: Mapping[str, Any]) -> Error | None:
    if "error" in msg:
        return Error({"kind": "evaluate_failed", "error": msg["error"]})
    details = lookup_path(msg, ["result", "exceptionDetails"])
    if details is not None:
        description = lookup_path(details, ["exception", "description"]) or lookup_path(details, ["text"], "")
        return Error({"kind": "evaluate_failed", "description": description})
    return None


def _wait_for_params(state: State) -> dict[str, Any]:
    selector = fetch_path(state, ["wait_for", "selector"])
    attribute = fetch_path(state, ["wait_for", "attribute"])
    return {"expression": _WAIT_FOR_JS % (json.dumps(selector), json.dumps(attribute))}


_b = ProtocolBuilder("navigate")

with _b.if_option("set_cookie"):
    _b.call("set_cookie", "Network.setCookie", _cookie_params, {"httpOnly": True, "secure": True})
    _b.await_response("cookie_set")

with _b.if_option("source_type", "html"):
    _b.call("get_frame_tree", "Page.getFrameTree", [], {})
    _b.await_response("frame_tree", [(["frameTree", "frame", "id"], "frameId")])
    _b.call("set_content", "Page.setDocumentContent", ["html", "frameId"], {})
    _b.await_response("content_set")
    _b.await_notification("page_load_event", "Page.loadEventFired")

with _b.if_option("source_type", "url"):
    _b.call("navigate", "Page.navigate", ["url"], {})
    _b.await_response("navigated", ["frameId"], callback=_navigated)
    _b.await_notification("frame_stopped_loading", "Page.frameStoppedLoading", ["frameId"])

with _b.if_option("evaluate"):
    _b.call("evaluate", "Runtime.evaluate", _evaluate_params, {"awaitPromise": True, "returnByValue": True})
    _b.await_response("evaluated", callback=_evaluated)

with _b.if_option("wait_for"):
    _b.call("wait_for", "Runtime.evaluate", _wait_for_params, {"awaitPromise": True, "returnByValue": True})
    _b.await_response("waited", callback=_evaluated)

DEFINITION = _b.build()
