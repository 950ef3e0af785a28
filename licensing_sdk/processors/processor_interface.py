"""
Injectable processor interface.

A processor turns one injectable into a string identifier describing where
its content now lives. The default implementation is InjectableMaterializer;
hosts may supply their own processor to send content to a custom sink.

Example custom processor:
```python
class DatabaseSinkProcessor(InjectableProcessorInterface):
    def __init__(self, store):
        self.store = store

    def handle(self, injectable, secret, base_path, verify) -> str:
        body = verify_and_decrypt(injectable.encrypted_content, secret, verify)
        row_id = self.store.save(injectable.slug, body)
        return f"db://injectables/{row_id}"
```

Exactly one processor is active per bootstrap run and it is invoked once per
injectable, in the order the licensing service returned them.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

from ..schemas.injectable_schema import Injectable


class InjectableProcessorInterface(ABC):
    """Capability to materialize a single injectable."""

    @abstractmethod
    def handle(
        self, injectable: Injectable, secret: str, base_path: str, verify: bool
    ) -> str:
        """
        Materialize one injectable.

        Args:
            injectable: Injectable as retrieved from the licensing service
            secret: Project secret for decryption
            base_path: Base directory for file output
            verify: Whether signatures must be verified before decrypting

        Returns:
            String identifier of where or how the content now lives
        """
        pass

    def get_processor_info(self) -> Dict[str, Any]:
        """
        Return processor metadata.

        Default implementation returns class name.
        Override for custom info.
        """
        return {"name": self.__class__.__name__, "version": "1.0.0"}
