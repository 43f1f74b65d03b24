from __future__ import annotations

from ..builder import ProtocolBuilder
from . import navigate, reset_target

_b = ProtocolBuilder("capture_screenshot")

_b.include(navigate.DEFINITION)
_b.call(
    "capture_screenshot",
    "Page.captureScreenshot",
    lambda state: state.get("capture_screenshot") or {},
    {"format": "png"},
)
_b.await_response("captured", ["data"])
_b.include(reset_target.DEFINITION)
_b.output("data")

DEFINITION = _b.build()
