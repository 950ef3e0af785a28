"""
In-memory output handler for the inline_render and stream modes.

Nothing is written to disk; the decrypted content is handed back to the
caller as the location identifier. Text injectables come back as UTF-8 text,
file injectables as base64 so binary content survives the string contract.
"""

import base64

from ...constants import InjectableMode
from ...exceptions import MaterializationError
from ...schemas.injectable_schema import Injectable
from .base import OutputHandler, OutputHandlerResult

INLINE_MODES = (InjectableMode.INLINE_RENDER.value, InjectableMode.STREAM.value)


class InlineOutputHandler(OutputHandler):
    """Return decrypted content directly instead of persisting it."""

    def __init__(self, mode: str = InjectableMode.INLINE_RENDER.value):
        super().__init__(destination="memory", config={"mode": mode})
        self.mode = mode

    def handle(self, injectable: Injectable, plaintext: bytes) -> OutputHandlerResult:
        if injectable.is_binary:
            content = base64.b64encode(plaintext).decode("ascii")
            encoding = "base64"
        else:
            try:
                content = plaintext.decode("utf-8")
            except UnicodeDecodeError as e:
                raise MaterializationError(
                    f"Injectable '{injectable.slug}' is not valid UTF-8 text",
                    slug=injectable.slug,
                    cause=e,
                    phase="render",
                )
            encoding = "utf-8"

        self.logger.debug(
            "Injectable handed back in memory",
            extra={"slug": injectable.slug, "mode": self.mode, "content_length": len(plaintext)},
        )

        return self._create_success_result(
            injectable,
            mode=self.mode,
            location=content,
            persisted=False,
            execution_duration_ms=0.0,
            metadata={"encoding": encoding},
        )
