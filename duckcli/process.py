"""Thin asyncio wrapper around short-lived CLI subprocesses."""

from __future__ import annotations

import asyncio
import logging
import subprocess
import sys
from dataclasses import dataclass
from typing import Sequence

LOG = logging.getLogger(__name__)


class ProcessError(RuntimeError):
    """Raised when a subprocess cannot be spawned or exits unsuccessfully."""

    def __init__(
        self,
        message: str,
        *,
        returncode: int | None = None,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr

    @property
    def detail(self) -> str:
        """Most useful diagnostic text: stderr, then stdout, then the message."""

        return self.stderr.strip() or self.stdout.strip() or str(self)


@dataclass(frozen=True, slots=True)
class ProcessOutput:
    """Captured output of a finished subprocess."""

    returncode: int
    stdout: str
    stderr: str


async def run_process(executable: str, args: Sequence[str]) -> ProcessOutput:
    """Run ``executable`` with ``args`` and capture its decoded output.

    A non-zero exit raises :class:`ProcessError` carrying both streams. Cancelling the
    awaiting task kills the child process.
    """

    kwargs: dict[str, object] = {}
    if sys.platform == "win32":
        kwargs["creationflags"] = subprocess.CREATE_NO_WINDOW
    LOG.debug("Spawning %s with %d argument(s)", executable, len(args))
    try:
        proc = await asyncio.create_subprocess_exec(
            executable,
            *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            **kwargs,
        )
    except (OSError, ValueError) as exc:
        raise ProcessError(f"Failed to start {executable}: {exc}") from exc

    try:
        raw_stdout, raw_stderr = await proc.communicate()
    except asyncio.CancelledError:
        if proc.returncode is None:
            proc.kill()
        raise

    stdout = _decode(raw_stdout)
    stderr = _decode(raw_stderr)
    returncode = proc.returncode if proc.returncode is not None else -1
    if returncode != 0:
        raise ProcessError(
            f"{executable} exited with status {returncode}.",
            returncode=returncode,
            stdout=stdout,
            stderr=stderr,
        )
    return ProcessOutput(returncode=returncode, stdout=stdout, stderr=stderr)


def _decode(payload: bytes | None) -> str:
    if not payload:
        return ""
    return payload.decode("utf-8", errors="replace")


__all__ = ["ProcessError", "ProcessOutput", "run_process"]
