from __future__ import annotations

import json
import shlex
import subprocess
import threading
from pathlib import Path
from typing import IO, Any, Optional, Sequence

from ..core.domain.exceptions import SubprocessError
from ..core.ports import LoggerPort


DEFAULT_COMMAND = ("npm", "audit", "--json")
DEFAULT_MAX_BUFFER = 10 * 1024 * 1024
READ_CHUNK = 64 * 1024


class _CappedReader:
    """Collects a stream up to ``limit`` bytes; kills the process past it."""

    def __init__(self, stream: IO[bytes], proc: subprocess.Popen, limit: int) -> None:
        self._stream = stream
        self._proc = proc
        self._limit = limit
        self._chunks: list[bytes] = []
        self._size = 0
        self.overflowed = False

    def read(self) -> None:
        while True:
            chunk = self._stream.read(READ_CHUNK)
            if not chunk:
                return
            self._size += len(chunk)
            if self._size > self._limit:
                self.overflowed = True
                self._chunks = []
                self._proc.kill()
                return
            self._chunks.append(chunk)

    @property
    def data(self) -> bytes:
        return b"".join(self._chunks)


class NpmAuditScanner:
    """Runs ``npm audit --json`` synchronously and decodes its report.

    npm exits non-zero whenever vulnerabilities are found, so the exit code
    is not treated as failure; anything on stderr is. Neither stream is held
    beyond ``max_buffer`` bytes: the process is killed once one exceeds it.
    """

    def __init__(
        self,
        *,
        logger: LoggerPort,
        max_buffer: int = DEFAULT_MAX_BUFFER,
        timeout: Optional[float] = None,
        cwd: Optional[Path] = None,
        command: Sequence[str] = DEFAULT_COMMAND,
    ) -> None:
        self._logger = logger
        self._max_buffer = max_buffer
        self._timeout = timeout
        self._cwd = cwd
        self._command = list(command)

    def run(self) -> Any:
        cmd_text = " ".join(shlex.quote(x) for x in self._command)
        self._logger.info("audit_started", command=cmd_text)

        try:
            proc = subprocess.Popen(
                self._command,
                cwd=str(self._cwd) if self._cwd else None,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise SubprocessError(f"Could not execute the `{cmd_text}` command: {e}") from e

        timed_out = threading.Event()

        def _expire() -> None:
            timed_out.set()
            proc.kill()

        timer: Optional[threading.Timer] = None
        if self._timeout is not None:
            timer = threading.Timer(self._timeout, _expire)
            timer.daemon = True
            timer.start()

        stdout = _CappedReader(proc.stdout, proc, self._max_buffer)
        stderr = _CappedReader(proc.stderr, proc, self._max_buffer)
        # stderr is drained concurrently so a full pipe cannot block the child
        stderr_reader = threading.Thread(target=stderr.read, daemon=True)
        stderr_reader.start()
        try:
            stdout.read()
            stderr_reader.join()
            proc.wait()
        finally:
            if timer is not None:
                timer.cancel()
            proc.stdout.close()
            proc.stderr.close()

        if timed_out.is_set():
            raise SubprocessError(f"`{cmd_text}` did not finish within {self._timeout} seconds")

        if stdout.overflowed or stderr.overflowed:
            raise SubprocessError(
                f"`{cmd_text}` output exceeded the buffer limit of {self._max_buffer} bytes"
            )

        error_text = stderr.data.decode("utf-8", errors="replace")
        if error_text.strip():
            raise SubprocessError(f"Could not execute the `{cmd_text}` command.\n{error_text.strip()}")

        try:
            return json.loads(stdout.data.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise SubprocessError(f"`{cmd_text}` did not produce valid JSON: {e}") from e
