"""
Processor factory - resolves the configured injectables processor.

The selector is resolved once, when the orchestrator is built:

- None or "default": the built-in InjectableMaterializer
- an object with a ``handle`` method: used as is
- a class: instantiated without arguments
- a plain callable ``fn(injectable, secret, base_path, verify) -> str``
- an import path, "package.module:Name" or "package.module.Name"
"""

import importlib
import inspect
from typing import Any, Callable, Optional

from ..exceptions import InvalidConfigValueError, MaterializationError
from ..schemas.injectable_schema import Injectable
from ..utils.logger import get_logger
from .injectable_materializer import InjectableMaterializer
from .processor_interface import InjectableProcessorInterface

DEFAULT_SELECTORS = (None, "", "default")


def _location(value: Any, injectable: Injectable) -> str:
    if not isinstance(value, str):
        raise MaterializationError(
            f"Injectables processor must return a location string, got {type(value).__name__}",
            slug=injectable.slug,
            phase="processor",
        )
    return value


class CallableProcessor(InjectableProcessorInterface):
    """Adapts a plain function to the processor interface."""

    def __init__(self, func: Callable[..., Any]):
        self.func = func

    def handle(self, injectable: Injectable, secret: str, base_path: str, verify: bool) -> str:
        return _location(self.func(injectable, secret, base_path, verify), injectable)

    def get_processor_info(self):
        return {"name": getattr(self.func, "__qualname__", repr(self.func)), "version": "1.0.0"}


class DuckTypedProcessor(InjectableProcessorInterface):
    """Wraps any object exposing ``handle`` without inheriting the interface."""

    def __init__(self, target: Any):
        self.target = target

    def handle(self, injectable: Injectable, secret: str, base_path: str, verify: bool) -> str:
        return _location(self.target.handle(injectable, secret, base_path, verify), injectable)

    def get_processor_info(self):
        return {"name": type(self.target).__name__, "version": "1.0.0"}


def _import_selector(path: str) -> Any:
    if ":" in path:
        module_name, _, attr = path.partition(":")
    else:
        module_name, _, attr = path.rpartition(".")

    if not module_name or not attr:
        raise InvalidConfigValueError(
            f"Processor import path must name a module and an attribute: {path!r}",
            field="injectables_processor",
        )

    try:
        module = importlib.import_module(module_name)
        return getattr(module, attr)
    except (ImportError, AttributeError) as e:
        raise InvalidConfigValueError(
            f"Cannot import injectables processor {path!r}",
            field="injectables_processor",
            cause=e,
        )


def create_processor(selector: Optional[Any] = None) -> InjectableProcessorInterface:
    """
    Resolve a processor selector into a processor instance.

    Args:
        selector: See module docstring

    Returns:
        The processor to use for every injectable of the run

    Raises:
        InvalidConfigValueError: If the selector cannot be resolved
    """
    logger = get_logger()

    if isinstance(selector, str) and selector.strip() in DEFAULT_SELECTORS:
        selector = None
    if selector is None:
        return InjectableMaterializer()

    if isinstance(selector, str):
        selector = _import_selector(selector.strip())

    if inspect.isclass(selector):
        try:
            selector = selector()
        except TypeError as e:
            raise InvalidConfigValueError(
                f"Processor class {selector.__name__} must be constructible without arguments",
                field="injectables_processor",
                cause=e,
            )

    if isinstance(selector, InjectableProcessorInterface):
        processor = selector
    elif callable(getattr(selector, "handle", None)):
        processor = DuckTypedProcessor(selector)
    elif callable(selector):
        processor = CallableProcessor(selector)
    else:
        raise InvalidConfigValueError(
            f"Unsupported injectables processor: {type(selector).__name__}",
            field="injectables_processor",
        )

    logger.debug("Custom injectables processor selected", extra=processor.get_processor_info())
    return processor
