"""
File system output handler.

Writes decrypted injectables to ``<base_path>/<target_path>/<slug>`` using one
of three write modes:

- replace: overwrite the file
- append: open-or-create and add the content at the end
- prepend: open-or-create and insert the content before the existing content

append and prepend read and write the same file without locking. Concurrent
bootstraps that target the same injectables path must serialize
materialization themselves or use distinct paths.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

from ...constants import InjectableMode
from ...exceptions import MaterializationError
from ...schemas.injectable_schema import Injectable
from .base import OutputHandler, OutputHandlerResult, OutputHandlerStatus

WRITE_MODES = (
    InjectableMode.REPLACE.value,
    InjectableMode.APPEND.value,
    InjectableMode.PREPEND.value,
)


class FileOutputHandler(OutputHandler):
    """
    Output handler for local file system writes.

    Configuration:
        - write_mode: "replace", "append" or "prepend" (default: "replace")
        - create_directories: Whether to create parent directories (default: True)
        - fallback: Mark results as a replace fallback for an unsupported mode

    Example:
        handler = FileOutputHandler(
            destination="/srv/app/injectables",
            config={"write_mode": "append"},
        )
        result = handler.handle(injectable, b"body { color: red; }")
    """

    def __init__(self, destination: str, config: Optional[Dict[str, Any]] = None):
        super().__init__(destination, config)
        self.write_mode = self.config.get("write_mode", InjectableMode.REPLACE.value)
        self.create_directories = self.config.get("create_directories", True)
        self.fallback = self.config.get("fallback", False)
        self.base_path = Path(destination)

        if self.write_mode not in WRITE_MODES:
            raise ValueError(
                f"Invalid write_mode: {self.write_mode}. Must be one of {', '.join(WRITE_MODES)}"
            )

    def target_file(self, injectable: Injectable) -> Path:
        """
        Resolve the absolute file path for an injectable.

        Raises:
            MaterializationError: If the target escapes the base path
        """
        base = self.base_path.resolve()
        relative = injectable.target_path.strip("/\\")
        target = (base / relative / injectable.slug).resolve()

        if base not in target.parents:
            raise MaterializationError(
                f"Target path for '{injectable.slug}' escapes the injectables path",
                slug=injectable.slug,
                target_path=injectable.target_path,
                phase="resolve_target",
            )
        return target

    def _ensure_directory_exists(self, file_path: Path, slug: str) -> None:
        if not self.create_directories:
            return
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise MaterializationError(
                f"Failed to create directory: {file_path.parent}",
                slug=slug,
                cause=e,
                directory_path=str(file_path.parent),
                phase="write",
            )

    def _write(self, file_path: Path, plaintext: bytes) -> None:
        if self.write_mode == InjectableMode.APPEND.value:
            with open(file_path, "ab") as f:
                f.write(plaintext)
        elif self.write_mode == InjectableMode.PREPEND.value:
            existing = file_path.read_bytes() if file_path.exists() else b""
            with open(file_path, "wb") as f:
                f.write(plaintext + existing)
        else:
            with open(file_path, "wb") as f:
                f.write(plaintext)

    def handle(self, injectable: Injectable, plaintext: bytes) -> OutputHandlerResult:
        """
        Write decrypted content to the injectable's target file.

        Returns:
            OutputHandlerResult whose location is the absolute path written

        Raises:
            MaterializationError: On path, permission or file system errors
        """
        file_path = self.target_file(injectable)
        self._ensure_directory_exists(file_path, injectable.slug)

        try:
            _, duration_ms = self._execute_with_timing(lambda: self._write(file_path, plaintext))
        except PermissionError as e:
            raise MaterializationError(
                f"Permission denied when writing to file: {file_path}",
                slug=injectable.slug,
                cause=e,
                file_path=str(file_path),
                write_mode=self.write_mode,
                phase="write",
            )
        except OSError as e:
            raise MaterializationError(
                f"OS error when writing to file: {file_path}",
                slug=injectable.slug,
                cause=e,
                file_path=str(file_path),
                write_mode=self.write_mode,
                phase="write",
            )

        self.logger.info(
            "Injectable written to file",
            extra={
                "slug": injectable.slug,
                "file_path": str(file_path),
                "write_mode": self.write_mode,
                "content_length": len(plaintext),
                "file_size_bytes": os.path.getsize(file_path),
            },
        )

        return self._create_success_result(
            injectable,
            mode=self.write_mode,
            location=str(file_path),
            persisted=True,
            execution_duration_ms=duration_ms,
            status=OutputHandlerStatus.FALLBACK if self.fallback else OutputHandlerStatus.SUCCESS,
            metadata={"write_mode": self.write_mode},
        )
