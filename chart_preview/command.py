"""Library for running the external chart tooling and returning its output.

Commands share a concurrency limit and each one is bounded by a timeout so
that a stuck `helm` invocation fails the render instead of hanging it.
"""

import asyncio
import logging
import os
import shlex
import subprocess
from dataclasses import dataclass

from .exceptions import CommandException

_LOGGER = logging.getLogger(__name__)

_CONCURRENCY = 4
_SEM = asyncio.Semaphore(_CONCURRENCY)
DEFAULT_TIMEOUT = 120.0


# No public API
__all__: list[str] = []


@dataclass
class Command:
    """An external program invocation."""

    cmd: list[str]
    """Program and arguments, passed without a shell."""

    exc: type[CommandException] = CommandException
    """Exception raised when the program fails."""

    env: dict[str, str] | None = None
    """Extra environment variables layered over the current environment."""

    timeout: float = DEFAULT_TIMEOUT
    """Seconds to wait before the program is considered stuck."""

    def __str__(self) -> str:
        """Render as a shell-like debug string."""
        return shlex.join(self.cmd)

    async def run(self) -> bytes:
        """Run the program, returning stdout."""
        _LOGGER.debug("Running command: %s", self)
        proc = await asyncio.create_subprocess_exec(
            *self.cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            env={**os.environ, **(self.env or {})},
        )
        try:
            out, err = await proc.communicate()
        except asyncio.CancelledError:
            if proc.returncode is None:
                _LOGGER.debug("Killing command: %s", self)
                proc.kill()
                await proc.wait()
            raise
        if proc.returncode:
            errors = [f"Command '{self}' failed with return code {proc.returncode}"]
            if err:
                errors.append(err.decode("utf-8").strip())
            _LOGGER.debug("\n".join(errors))
            raise self.exc("\n".join(errors))
        if err:
            _LOGGER.debug("Command '%s' stderr: %s", self, err.decode("utf-8"))
        return out


async def run(cmd: Command) -> str:
    """Run the specified command and return stdout as text."""
    async with _SEM:
        try:
            out = await asyncio.wait_for(cmd.run(), cmd.timeout)
        except asyncio.TimeoutError as err:
            raise cmd.exc(f"Command '{cmd}' timed out after {cmd.timeout}s") from err
        except FileNotFoundError as err:
            raise cmd.exc(f"Command '{cmd}' could not be started: {err}") from err
    return out.decode("utf-8") if out else ""
