# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Per-call diagnostic sink for training.

Every train() call gets its own transient log file next to the model
artifact, named from the artifact plus a random suffix
(e.g. `annotator.crfsuite.k2x9q1ab.log`). The engine writes progress into
it while training runs, the orchestrator reads it back afterwards, and the
file is deleted on every exit path, including Ctrl-C.

Usage:
    with DiagnosticSink(output_path) as sink:
        engine.build(..., sink=sink)
        sink.raise_if_failed()
    raw_log = sink.text
"""

import logging
import os
import tempfile
from pathlib import Path
from types import TracebackType
from typing import Optional, TextIO

from seqcrf.exceptions import DiagnosticSinkError
from seqcrf.logging.logger import get_logger
from seqcrf.utils.filesystem import safe_delete, safe_read

logger: logging.Logger = get_logger(__name__)

# How much of the log to repeat at ERROR when training fails.
TAIL_LINES = 20


def log_tail(text: str, lines: int = TAIL_LINES) -> str:
    return "\n".join(text.splitlines()[-lines:])


class DiagnosticSink:
    """
    Context manager owning one transient training log.

    Writes that fail are remembered, because the engine calls write() from
    a native callback where a raised exception may never reach Python code.
    Call raise_if_failed() once the engine returns.
    """

    def __init__(self, output_path: Path) -> None:
        self._output_path = Path(output_path)
        self._path: Optional[Path] = None
        self._stream: Optional[TextIO] = None
        self._error: Optional[OSError] = None
        self._text: Optional[str] = None

    @property
    def path(self) -> Path:
        if self._path is None:
            raise DiagnosticSinkError("Diagnostic sink has not been opened")
        return self._path

    @property
    def text(self) -> str:
        """Everything the engine wrote. Available once the sink is read or closed."""
        if self._text is None:
            raise DiagnosticSinkError("Diagnostic sink has not been read yet")
        return self._text

    def __enter__(self) -> "DiagnosticSink":
        directory = self._output_path.parent
        try:
            fd, name = tempfile.mkstemp(
                prefix=f"{self._output_path.name}.",
                suffix=".log",
                dir=str(directory),
            )
        except OSError as err:
            raise DiagnosticSinkError(
                f"Cannot create training log in {directory}: {err}"
            ) from err

        self._path = Path(name)
        self._stream = os.fdopen(fd, "w", encoding="utf-8")
        logger.debug("Diagnostic sink allocated", extra={"path": str(self._path)})
        return self

    def write(self, text: str) -> int:
        if self._stream is None:
            raise DiagnosticSinkError("Diagnostic sink is not open for writing")
        try:
            written = self._stream.write(text)
            self._stream.flush()
        except OSError as err:
            if self._error is None:
                self._error = err
            raise DiagnosticSinkError(f"Cannot write training log {self._path}: {err}") from err
        return written

    def raise_if_failed(self) -> None:
        """Re-raise the first write failure, if there was one."""
        if self._error is not None:
            raise DiagnosticSinkError(
                f"Cannot write training log {self._path}: {self._error}"
            ) from self._error

    def read(self) -> str:
        """Close the file and read the full log. Idempotent."""
        if self._text is not None:
            return self._text
        self._close()
        try:
            self._text = safe_read(self.path)
        except OSError as err:
            raise DiagnosticSinkError(f"Cannot read training log {self._path}: {err}") from err
        return self._text

    def _close(self) -> None:
        if self._stream is not None:
            stream, self._stream = self._stream, None
            try:
                stream.close()
            except OSError as err:
                raise DiagnosticSinkError(
                    f"Cannot close training log {self._path}: {err}"
                ) from err

    def _delete(self) -> None:
        try:
            safe_delete(self.path)
        except OSError as err:
            raise DiagnosticSinkError(f"Cannot delete training log {self._path}: {err}") from err
        logger.debug("Diagnostic sink removed", extra={"path": str(self._path)})

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        if self._path is None:
            return

        if exc_type is None:
            try:
                self.read()
            finally:
                self._delete()
            return

        # Failure path: report what we can, clean up, let the original
        # exception propagate untouched.
        try:
            text = self.read()
        except DiagnosticSinkError as err:
            logger.warning("Training log unreadable after failure", extra={"error": str(err)})
            text = ""

        if text.strip():
            logger.error(
                "Training failed, last lines of the training log follow",
                extra={"path": str(self._path), "log_tail": log_tail(text)},
            )

        try:
            self._delete()
        except DiagnosticSinkError as err:
            logger.error("Training log left behind", extra={"error": str(err)})
