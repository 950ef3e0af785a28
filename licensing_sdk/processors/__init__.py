"""Injectable processors and their output handlers."""

from .injectable_materializer import InjectableMaterializer
from .output_handlers import FileOutputHandler, InlineOutputHandler, OutputHandlerResult
from .processing_result import InjectableOutcome
from .processor_factory import create_processor
from .processor_interface import InjectableProcessorInterface

__all__ = [
    "InjectableMaterializer",
    "InjectableProcessorInterface",
    "InjectableOutcome",
    "FileOutputHandler",
    "InlineOutputHandler",
    "OutputHandlerResult",
    "create_processor",
]
