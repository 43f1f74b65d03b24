from __future__ import annotations

from ..builder import ProtocolBuilder

_b = ProtocolBuilder("close_session")

_b.call("close_target", "Target.closeTarget", ["targetId"], {})
_b.await_response("target_closed", ["success"])

with _b.if_option("browserContextId"):
    _b.call("dispose_browser_context", "Target.disposeBrowserContext", ["browserContextId"], {})
    _b.await_response("browser_context_disposed")

_b.output("success")

DEFINITION = _b.build()
