"""
Output handlers for materialized injectables.

Available output handlers:
- OutputHandler: Abstract base class for all handlers
- FileOutputHandler: replace / append / prepend writes under the injectables path
- InlineOutputHandler: in-memory hand-back for inline_render and stream
"""

from .base import OutputHandler, OutputHandlerResult, OutputHandlerStatus
from .file_output import FileOutputHandler
from .inline_output import InlineOutputHandler

__all__ = [
    "OutputHandler",
    "OutputHandlerResult",
    "OutputHandlerStatus",
    "FileOutputHandler",
    "InlineOutputHandler",
]
