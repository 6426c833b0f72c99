"""
External command execution for codeium-installer.

Used to run the decompression utility during installs.
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Dict, List, Optional

from codeium_installer.errors import TerminalError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """Outcome of an external command that exited successfully."""
    returncode: int
    stdout: str = ""
    stderr: str = ""


class Terminal:
    """
    Runs external commands as asyncio subprocesses.

    Inject a replacement into InstallationManager to control how commands
    are executed (e.g. in tests).
    """

    async def run_command(
        self,
        command: str,
        arguments: Optional[List[str]] = None,
        environment: Optional[Dict[str, str]] = None,
    ) -> CommandResult:
        """
        Run a command and wait for it to finish.

        Args:
            command: Executable name or path
            arguments: Command-line arguments
            environment: Extra environment variables for the child process

        Returns:
            CommandResult for a zero exit status

        Raises:
            TerminalError: If the command cannot be launched or exits non-zero
        """
        cmd = [command, *(arguments or [])]
        env = dict(os.environ)
        env.update(environment or {})

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=env,
            )
        except (OSError, ValueError) as e:
            raise TerminalError(
                f"Failed to launch {command}: {e}", command=command
            ) from e

        logger.debug(f"Started {command} (PID: {process.pid})")
        try:
            stdout, stderr = await process.communicate()
        except asyncio.CancelledError:
            await _stop_process(process)
            raise
        out = stdout.decode("utf-8", errors="replace") if stdout else ""
        err = stderr.decode("utf-8", errors="replace") if stderr else ""

        if process.returncode != 0:
            raise TerminalError(
                f"{command} exited with code {process.returncode}: {err.strip()}",
                command=command,
                returncode=process.returncode,
                stderr=err,
            )

        return CommandResult(returncode=process.returncode, stdout=out, stderr=err)


async def _stop_process(process: asyncio.subprocess.Process) -> None:
    """Terminate a child process, killing it if it does not exit in time."""
    if process.returncode is not None:
        return
    try:
        process.terminate()
    except ProcessLookupError:
        return
    try:
        await asyncio.wait_for(process.wait(), timeout=5.0)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
    logger.debug(f"Stopped PID {process.pid} after cancellation")
