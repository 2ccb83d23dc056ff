"""Relay the filtered diff through a downstream pretty-printer.

The downstream command runs through the shell, the way git starts its own
pager. Filtered bytes are written to its stdin on the calling thread while a
drain thread copies its stdout into the final sink. Both sides are joined
before ``run`` returns.
"""

from __future__ import annotations

import logging
import subprocess
import threading
from typing import BinaryIO, Callable, Optional

from diff_gitignore_filter.errors import StreamError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class DownstreamRelay:
    """A running downstream process and the thread draining its output."""

    def __init__(self, command: str, process: subprocess.Popen) -> None:
        self.command = command
        self.process = process
        self._sink_error: Optional[BaseException] = None

    def _drain(self, sink: BinaryIO) -> None:
        stdout = self.process.stdout
        assert stdout is not None
        try:
            while True:
                chunk = stdout.read1(CHUNK_SIZE)
                if not chunk:
                    break
                sink.write(chunk)
                sink.flush()
        except BrokenPipeError as exc:
            logger.debug("Final output closed while draining %r", self.command)
            self._sink_error = exc
        except OSError as exc:
            error = StreamError(f"Failed to write downstream output: {exc}")
            error.__cause__ = exc
            self._sink_error = error
        finally:
            stdout.close()

    def run(self, feed: Callable[[BinaryIO], object], sink: BinaryIO) -> int:
        """Feed the process with *feed*, copy its output to *sink*, return its exit code.

        Raises BrokenPipeError when *sink* was closed and StreamError on any
        other output failure. Cleanup always runs, even when *feed* raises.
        """
        stdin = self.process.stdin
        assert stdin is not None
        drainer = threading.Thread(
            target=self._drain, args=(sink,), name="downstream-drain", daemon=True
        )
        drainer.start()
        try:
            try:
                feed(stdin)
            except BrokenPipeError:
                logger.debug("Downstream %r stopped reading its input", self.command)
        finally:
            self._close_stdin()
            drainer.join()
            returncode = self.process.wait()

        if self._sink_error is not None:
            raise self._sink_error
        logger.debug("Downstream %r exited with %d", self.command, returncode)
        return returncode

    def _close_stdin(self) -> None:
        stdin = self.process.stdin
        if stdin is None or stdin.closed:
            return
        try:
            stdin.close()
        except BrokenPipeError:
            logger.debug("Downstream %r exited before its input was flushed", self.command)


def spawn(command: str) -> DownstreamRelay:
    """Start *command* through the shell with piped stdin and stdout."""
    try:
        process = subprocess.Popen(
            command,
            shell=True,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
        )
    except OSError as exc:
        raise StreamError(f"Failed to start downstream command {command!r}: {exc}") from exc
    logger.debug("Started downstream %r (pid %d)", command, process.pid)
    return DownstreamRelay(command, process)


def exit_status(returncode: int) -> int:
    """Map a child return code to a shell-style exit status (signal N → 128+N)."""
    return 128 - returncode if returncode < 0 else returncode
