"""Concrete CDP protocol definitions.

Browser-level (no sessionId): `spawn_session`, `close_session`.
Session-level (pass the spawned sessionId): `navigate`, `reset_target`,
`print_to_pdf`, `capture_screenshot`.
"""

from .capture_screenshot import DEFINITION as CAPTURE_SCREENSHOT
from .close_session import DEFINITION as CLOSE_SESSION
from .navigate import DEFINITION as NAVIGATE
from .print_to_pdf import DEFINITION as PRINT_TO_PDF
from .reset_target import DEFINITION as RESET_TARGET
from .spawn_session import DEFINITION as SPAWN_SESSION

__all__ = [
    "CAPTURE_SCREENSHOT",
    "CLOSE_SESSION",
    "NAVIGATE",
    "PRINT_TO_PDF",
    "RESET_TARGET",
    "SPAWN_SESSION",
]
