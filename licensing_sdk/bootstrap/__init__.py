"""Bootstrap orchestration."""

from .bootstrap_result import BootstrapResult
from .orchestrator import BootstrapOrchestrator, bootstrap

__all__ = ["BootstrapOrchestrator", "BootstrapResult", "bootstrap"]
