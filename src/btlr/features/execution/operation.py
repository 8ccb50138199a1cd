"""src/btlr/features/execution/operation.py
What: Run one command in one directory and capture its outcome.
Why: Give the pool and the reporters a single handle per target directory.
"""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import threading
import time
from collections.abc import Sequence
from concurrent.futures import Future
from functools import partial
from pathlib import Path
from typing import IO, Final

from btlr.config.durations import format_duration
from btlr.platform.logging import logger

from .cancellation import CancelReason, CancellationToken
from .models import SKIPPED_RESULT, STATUS_EVENTS, RunEvent, RunResult, StatusType

POLL_INTERVAL_SECONDS: Final[float] = 0.05
READER_GRACE_SECONDS: Final[float] = 1.0
_CHUNK_SIZE: Final[int] = 64 * 1024
_POSIX: Final[bool] = os.name == "posix"


class Operation:
    """A command bound to a single target directory.

    The outcome is published exactly once through a ``Future``: ``done()`` is
    a non-blocking probe and ``result()`` blocks until the outcome exists.
    Operations abandoned by a cancelled pool end up with a cancelled future,
    so ``result()`` raises ``concurrent.futures.CancelledError`` for them.
    """

    def __init__(self, directory: Path | str, command: Sequence[str]) -> None:
        if not command:
            raise ValueError("command must not be empty")
        self.directory: Final[Path] = Path(directory)
        self.command: Final[tuple[str, ...]] = tuple(command)
        self._future: Final[Future[RunResult]] = Future()
        self._output_lock: Final[threading.Lock] = threading.Lock()
        self._stdout: bytearray = bytearray()
        self._stderr: bytearray = bytearray()
        self._combined: bytearray = bytearray()

    def __repr__(self) -> str:
        return f"Operation(directory={str(self.directory)!r}, command={self.command!r})"

    def done(self) -> bool:
        """Return whether the operation has settled (finished, skipped or abandoned)."""

        return self._future.done()

    def running(self) -> bool:
        return self._future.running()

    def cancelled(self) -> bool:
        """Return whether the operation was abandoned before it could start."""

        return self._future.cancelled()

    @property
    def skipped(self) -> bool:
        return (
            self._future.done()
            and not self._future.cancelled()
            and self._future.result().status is StatusType.SKIPPED
        )

    def result(self, timeout: float | None = None) -> RunResult:
        """Block until the operation settles and return its immutable result."""

        return self._future.result(timeout)

    def skip(self) -> None:
        """Mark an operation that will never be submitted as skipped."""

        if self._future.running() or self._future.done():
            raise RuntimeError(f"cannot skip an operation that already started: {self!r}")
        self._future.set_result(SKIPPED_RESULT)
        self._log(logging.DEBUG, RunEvent.OPERATION_SKIP, "Operation skipped [dir=%s]", self.directory)

    def abandon(self) -> bool:
        """Give up on a pending operation; returns whether it was still pending."""

        return self._future.cancel()

    def execute(self, token: CancellationToken, timeout: float | None = None) -> None:
        """Run the command to completion, cancellation or timeout.

        Each operation may only be executed once; the claim is taken through
        the underlying future so a second call raises ``RuntimeError``.

        Args:
            token: Pool-wide cancellation token.
            timeout: Seconds the command may run, measured from now. ``None``
                or ``0`` means unlimited.
        """

        if not self._future.set_running_or_notify_cancel():
            return

        if timeout:
            token = token.with_timeout(timeout)

        started = time.monotonic()
        self._log(
            logging.DEBUG,
            RunEvent.OPERATION_START,
            "Operation started [dir=%s, cmd=%s]",
            self.directory,
            " ".join(self.command),
        )
        try:
            result = self._run(token, started, timeout)
        except Exception as exc:  # pragma: no cover
            result = RunResult(
                status=StatusType.ERROR,
                error=self._describe(str(exc) or type(exc).__name__),
                duration_seconds=time.monotonic() - started,
            )
        self._future.set_result(result)

        level = logging.DEBUG if result.status is StatusType.SUCCESS else logging.INFO
        self._log(
            level,
            STATUS_EVENTS[result.status],
            "Operation finished [dir=%s, status=%s, duration=%.2fs]",
            self.directory,
            result.status,
            result.duration_seconds,
            status=str(result.status),
            duration_seconds=round(result.duration_seconds, 4),
            error_message=result.error,
        )

    def _run(self, token: CancellationToken, started: float, timeout: float | None) -> RunResult:
        reason = token.reason
        if reason is not None:
            return RunResult(
                status=StatusType.ERROR,
                error=self._describe(_cancel_message(reason, timeout)),
                duration_seconds=time.monotonic() - started,
            )

        try:
            process = subprocess.Popen(
                self.command,
                cwd=self.directory,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                start_new_session=_POSIX,
            )
        except (OSError, ValueError) as exc:
            return RunResult(
                status=StatusType.ERROR,
                error=self._describe(f"failed to launch: {exc}"),
                duration_seconds=time.monotonic() - started,
            )

        assert process.stdout is not None and process.stderr is not None
        readers = [
            self._start_reader(process.stdout, self._stdout),
            self._start_reader(process.stderr, self._stderr),
        ]
        reason = self._wait(process, token)
        self._join_readers(readers, process, token, killed=reason is not None)

        return_code = process.returncode
        duration = time.monotonic() - started
        with self._output_lock:
            stdout, stderr, combined = bytes(self._stdout), bytes(self._stderr), bytes(self._combined)

        if reason is not None:
            status, error = StatusType.ERROR, self._describe(_cancel_message(reason, timeout))
        elif return_code == 0:
            status, error = StatusType.SUCCESS, None
        elif return_code < 0:
            status, error = StatusType.ERROR, self._describe(_signal_message(-return_code))
        else:
            status, error = StatusType.FAILURE, f"exit status {return_code}"

        return RunResult(
            status=status,
            stdout=stdout,
            stderr=stderr,
            combined=combined,
            error=error,
            return_code=return_code,
            duration_seconds=duration,
        )

    def _wait(self, process: subprocess.Popen[bytes], token: CancellationToken) -> CancelReason | None:
        """Wait for ``process``; kill it once ``token`` is cancelled."""

        while True:
            try:
                _ = process.wait(timeout=POLL_INTERVAL_SECONDS)
                return None
            except subprocess.TimeoutExpired:
                pass

            reason = token.reason
            if reason is None:
                continue
            if process.poll() is not None:
                return None
            _terminate(process)
            _ = process.wait()
            return reason

    def _join_readers(
        self,
        readers: list[threading.Thread],
        process: subprocess.Popen[bytes],
        token: CancellationToken,
        *,
        killed: bool,
    ) -> None:
        # Descendants may keep the pipes open after the direct child exits.
        give_up = time.monotonic() + READER_GRACE_SECONDS if killed else None
        for reader in readers:
            while reader.is_alive():
                reader.join(POLL_INTERVAL_SECONDS)
                if give_up is None and token.cancelled:
                    _terminate(process)
                    give_up = time.monotonic() + READER_GRACE_SECONDS
                if give_up is not None and time.monotonic() >= give_up:
                    logger.debug("Output readers still open after kill [dir=%s]", self.directory)
                    return

    def _start_reader(self, stream: IO[bytes], sink: bytearray) -> threading.Thread:
        thread = threading.Thread(
            target=self._pump,
            args=(stream, sink),
            name=f"btlr-reader-{self.directory.name or 'root'}",
            daemon=True,
        )
        thread.start()
        return thread

    def _pump(self, stream: IO[bytes], sink: bytearray) -> None:
        with stream:
            for chunk in iter(partial(os.read, stream.fileno(), _CHUNK_SIZE), b""):
                with self._output_lock:
                    sink.extend(chunk)
                    self._combined.extend(chunk)

    def _describe(self, message: str) -> str:
        return f"failed to run cmd ({' '.join(self.command)}): {message}"

    def _log(self, level: int, event: RunEvent, message: str, *args: object, **context: object) -> None:
        extra: dict[str, object] = {
            "run_event": event.value,
            "directory": str(self.directory),
            "command": " ".join(self.command),
        }
        extra.update(context)
        logger.log(level, message, *args, extra=extra)


def _terminate(process: subprocess.Popen[bytes]) -> None:
    """Forcibly stop ``process`` and, on POSIX, everything in its session."""

    if not _POSIX:
        process.kill()
        return
    try:
        os.killpg(process.pid, signal.SIGKILL)
    except ProcessLookupError:
        logger.debug("Process group %d already exited", process.pid)
    except PermissionError:
        process.kill()


def _cancel_message(reason: CancelReason, timeout: float | None) -> str:
    if reason is CancelReason.DEADLINE_EXCEEDED:
        if timeout is None:
            return "deadline exceeded, signal: killed"
        return f"timed out after {format_duration(timeout)}, signal: killed"
    return "interrupted before complete (sigint or sigterm)"


def _signal_message(number: int) -> str:
    try:
        description = signal.strsignal(number)
    except ValueError:
        description = None
    return f"signal: {(description or f'signal {number}').lower()}"


__all__ = ["Operation", "POLL_INTERVAL_SECONDS"]
