#!/usr/bin/env python3

import logging
import subprocess
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from ..errors import ToolInvocationError

logger = logging.getLogger(__name__)

REDACTED = "***"

@dataclass
class CommandResult:
    args: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def lines(self) -> List[str]:
        return [line.strip() for line in self.stdout.splitlines() if line.strip()]

class CommandRunner:
    """Runs external tools one at a time, failing fast on non-zero exit."""

    def __init__(self, env: Optional[Dict[str, str]] = None, secrets: Optional[Sequence[str]] = None,
                 timeout: Optional[float] = None):
        self.env = env
        self.secrets = [s for s in (secrets or []) if s]
        self.timeout = timeout

    def redact(self, args: Sequence[str]) -> List[str]:
        redacted = []
        for arg in args:
            for secret in self.secrets:
                arg = arg.replace(secret, REDACTED)
            redacted.append(arg)
        return redacted

    def run(self, args: Sequence[str], check: bool = True) -> CommandResult:
        args = [str(a) for a in args]
        shown = self.redact(args)
        logger.debug(f"Running: {' '.join(shown)}")

        try:
            proc = subprocess.run(args, capture_output=True, text=True,
                                  env=self.env, timeout=self.timeout)
        except FileNotFoundError:
            raise ToolInvocationError(shown, 127, f"{args[0]}: command not found")
        except subprocess.TimeoutExpired:
            raise ToolInvocationError(shown, 124, f"timed out after {self.timeout}s")

        result = CommandResult(
            args=shown,
            returncode=proc.returncode,
            stdout=proc.stdout or "",
            stderr=proc.stderr or ""
        )

        for line in result.stdout.splitlines():
            logger.debug(f"{args[0]}: {self.redact([line])[0]}")

        if not result.ok:
            stderr = self.redact([result.stderr])[0]
            if check:
                logger.error(f"Command failed ({result.returncode}): {' '.join(shown)}")
                raise ToolInvocationError(shown, result.returncode, stderr)
            logger.debug(f"Command exited {result.returncode}: {stderr.strip()}")

        return result
