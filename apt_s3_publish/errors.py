#!/usr/bin/env python3

from typing import List, Optional, Sequence


class PublisherError(Exception):
    """Base class for errors raised while publishing"""


class ConfigurationError(PublisherError):
    """Required configuration is missing or unusable"""

    def __init__(self, message: str, missing: Optional[Sequence[str]] = None):
        super().__init__(message)
        self.missing: List[str] = list(missing or [])


class ToolInvocationError(PublisherError):
    """An external command exited with a non-zero status"""

    def __init__(self, command: Sequence[str], returncode: int, stderr: str = ""):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        tool = self.command[0] if self.command else "command"
        message = f"{tool} exited with status {returncode}"
        if stderr:
            message += f": {stderr.strip()}"
        super().__init__(message)
