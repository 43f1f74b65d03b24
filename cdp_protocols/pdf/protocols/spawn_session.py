"""Create an isolated browser context + page target and attach to it (flat mode)."""

from __future__ import annotations

from ..builder import ProtocolBuilder

_b = ProtocolBuilder("spawn_session")

_b.call("create_browser_context", "Target.createBrowserContext", [], {"disposeOnDetach": True})
_b.await_response("browser_context_created", ["browserContextId"])

_b.call("create_target", "Target.createTarget", ["browserContextId"], {"url": "about:blank"})
_b.await_response("target_created", ["targetId"])

_b.call("attach", "Target.attachToTarget", ["targetId"], {"flatten": True})
_b.await_response("attached", ["sessionId"])

# From here on calls carry the new sessionId.
_b.call("enable_page", "Page.enable", [], {})
_b.await_response("page_enabled")

_b.call("enable_runtime", "Runtime.enable", [], {})
_b.await_response("runtime_enabled")

with _b.if_option("offline"):
    _b.call(
        "go_offline",
        "Network.emulateNetworkConditions",
        [],
        {"offline": True, "latency": 0, "downloadThroughput": 0, "uploadThroughput": 0},
    )
    _b.await_response("offline_set")

with _b.if_option("disable_scripts", True):
    _b.call("disable_scripts", "Emulation.setScriptExecutionDisabled", [], {"value": True})
    _b.await_response("scripts_disabled")

_b.output(["browserContextId", "targetId", "sessionId"])

DEFINITION = _b.build()
