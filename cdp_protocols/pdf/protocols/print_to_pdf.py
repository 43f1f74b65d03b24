from __future__ import annotations

from ..builder import ProtocolBuilder
from . import navigate, reset_target

_b = ProtocolBuilder("print_to_pdf")

_b.include(navigate.DEFINITION)
_b.call("print_to_pdf", "Page.printToPDF", lambda state: state.get("print_to_pdf") or {}, {})
_b.await_response("printed", ["data"])
_b.include(reset_target.DEFINITION)
_b.output("data")

DEFINITION = _b.build()
