"""
Async subprocess runner used for git and the AI command.

Components take a CommandRunner so tests can swap in canned output.
"""

import asyncio
from dataclasses import dataclass
from pathlib import Path


@dataclass
class CommandResult:
    """Captured output of one finished command."""

    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """Runs external commands with asyncio subprocesses."""

    async def run(
        self,
        cmd: list[str],
        input_text: str | None = None,
        cwd: Path | None = None,
        timeout: float | None = None,
    ) -> CommandResult:
        """
        Run `cmd`, optionally feeding `input_text` on stdin.

        Raises:
            FileNotFoundError: executable not found
            TimeoutError: command exceeded `timeout` seconds (process is killed)
        """
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            cwd=str(cwd) if cwd else None,
            stdin=asyncio.subprocess.PIPE if input_text is not None else asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdin_bytes = input_text.encode() if input_text is not None else None
        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(stdin_bytes), timeout)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            raise TimeoutError(f"{cmd[0]} timed out after {timeout}s")

        return CommandResult(
            returncode=proc.returncode,
            stdout=stdout.decode(errors="replace"),
            stderr=stderr.decode(errors="replace"),
        )
