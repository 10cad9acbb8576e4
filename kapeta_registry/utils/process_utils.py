"""External process utilities"""

import asyncio
import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..api.exceptions import CommandError

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Captured output of a finished command"""
    args: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        return "\n".join(part for part in (self.stdout, self.stderr) if part)


def _run(args: List[str],
         cwd: Optional[Path],
         env: Optional[Dict[str, str]],
         input_text: Optional[str]) -> CommandResult:
    full_env = None
    if env:
        full_env = dict(os.environ)
        full_env.update(env)

    try:
        completed = subprocess.run(
            args,
            cwd=str(cwd) if cwd else None,
            env=full_env,
            input=input_text,
            capture_output=True,
            text=True
        )
    except FileNotFoundError:
        return CommandResult(args=args, returncode=127, stderr=f"{args[0]}: command not found")

    return CommandResult(
        args=args,
        returncode=completed.returncode,
        stdout=completed.stdout or "",
        stderr=completed.stderr or ""
    )


async def run_command(args: List[str],
                      cwd: Optional[Union[str, Path]] = None,
                      env: Optional[Dict[str, str]] = None,
                      check: bool = True,
                      input_text: Optional[str] = None) -> CommandResult:
    """
    Run an external command without blocking the event loop

    Args:
        args: Command and arguments
        cwd: Working directory
        env: Extra environment variables
        check: Raise CommandError on non-zero exit
        input_text: Text passed on stdin

    Returns:
        Captured command result

    Raises:
        CommandError: If check is set and the command failed
    """
    logger.debug(f"Running: {' '.join(args)} (cwd={cwd})")
    loop = asyncio.get_running_loop()
    result = await loop.run_in_executor(
        None,
        _run,
        list(args),
        Path(cwd) if cwd else None,
        env,
        input_text
    )

    if check and not result.ok:
        raise CommandError(result.args, result.returncode, result.output)

    return result


def which(command: str) -> Optional[str]:
    """Locate an executable on PATH"""
    return shutil.which(command)
