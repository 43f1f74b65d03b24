"""Return a session's page to about:blank so it can be reused."""

from __future__ import annotations

from ..builder import ProtocolBuilder

_b = ProtocolBuilder("reset_target")

with _b.if_option("set_cookie"):
    _b.call("clear_cookies", "Network.clearBrowserCookies", [], {})
    _b.await_response("cookies_cleared")

_b.call("reset_history", "Page.resetNavigationHistory", [], {})
_b.await_response("history_reset")

_b.call("blank", "Page.navigate", [], {"url": "about:blank"})
_b.await_response("blanked", ["frameId"])
_b.await_notification("blank_stopped_loading", "Page.frameStoppedLoading", ["frameId"])

DEFINITION = _b.build()
