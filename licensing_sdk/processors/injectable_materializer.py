"""
Default injectable processor.

Resolves the content of an injectable (encrypted envelope or plaintext
fallback), decrypts and verifies it, then hands it to the output handler
selected by the injectable's mode:

    replace, unknown modes -> FileOutputHandler(write_mode="replace")
    append, prepend        -> FileOutputHandler(write_mode=<mode>)
    inject                 -> FileOutputHandler(write_mode="replace"), flagged as fallback
    inline_render, stream  -> InlineOutputHandler
"""

from typing import Optional

from ..constants import InjectableMode
from ..exceptions import BaseError, MalformedPayloadError
from ..schemas.injectable_schema import Injectable
from ..utils.encryption_utils import verify_and_decrypt
from ..utils.logger import get_logger
from .output_handlers import FileOutputHandler, InlineOutputHandler, OutputHandler
from .output_handlers.base import OutputHandlerResult
from .output_handlers.file_output import WRITE_MODES
from .output_handlers.inline_output import INLINE_MODES
from .processor_interface import InjectableProcessorInterface


class InjectableMaterializer(InjectableProcessorInterface):
    """Decrypt injectables and write them according to their mode."""

    def __init__(self):
        self.logger = get_logger()

    def handle(
        self, injectable: Injectable, secret: Optional[str], base_path: str, verify: bool
    ) -> str:
        return self.materialize(injectable, secret, base_path, verify)

    def materialize(
        self, injectable: Injectable, secret: Optional[str], base_path: str, verify: bool
    ) -> str:
        """
        Materialize one injectable.

        Returns:
            Absolute path written, or the content itself for inline_render/stream
        """
        return self.materialize_with_result(injectable, secret, base_path, verify).location

    def materialize_with_result(
        self, injectable: Injectable, secret: Optional[str], base_path: str, verify: bool
    ) -> OutputHandlerResult:
        """
        Materialize one injectable and return the handler's full result.

        Raises:
            SignatureMismatchError, MalformedPayloadError, DecryptionFailedError:
                Decryption failures, with slug and phase in their context
            MaterializationError: Write failures
        """
        plaintext = self.resolve_plaintext(injectable, secret, verify)
        handler = self.select_output_handler(injectable, base_path)
        self.logger.debug(
            "Output handler selected", extra={"slug": injectable.slug, **handler.get_handler_info()}
        )
        return handler.handle(injectable, plaintext)

    def resolve_plaintext(
        self, injectable: Injectable, secret: Optional[str], verify: bool
    ) -> bytes:
        """
        Return the decrypted content, or the plaintext fallback when the
        licensing service served the injectable unencrypted.
        """
        if injectable.encrypted_content:
            try:
                return verify_and_decrypt(injectable.encrypted_content, secret, verify)
            except BaseError as e:
                e.add_context(slug=injectable.slug, phase="decrypt")
                raise

        if injectable.content is not None:
            self.logger.debug(
                "Injectable served as plaintext, skipping decryption",
                extra={"slug": injectable.slug},
            )
            return injectable.content.encode("utf-8")

        raise MalformedPayloadError(
            f"Injectable '{injectable.slug}' has neither encrypted nor plain content",
            slug=injectable.slug,
            phase="resolve_content",
        )

    def select_output_handler(self, injectable: Injectable, base_path: str) -> OutputHandler:
        """Pick the output handler for the injectable's mode."""
        mode = injectable.mode

        if mode in INLINE_MODES:
            return InlineOutputHandler(mode=mode)

        if mode == InjectableMode.INJECT.value:
            # No marker-based insertion exists yet
            self.logger.warning(
                "Injectable mode 'inject' is unsupported, falling back to replace",
                extra={"slug": injectable.slug, "mode": mode},
            )
            return FileOutputHandler(
                base_path, {"write_mode": InjectableMode.REPLACE.value, "fallback": True}
            )

        if mode not in WRITE_MODES:
            self.logger.debug(
                "Unknown injectable mode, using replace",
                extra={"slug": injectable.slug, "mode": mode},
            )
            mode = InjectableMode.REPLACE.value

        return FileOutputHandler(base_path, {"write_mode": mode})
