"""Abstract interface for running external commands such as git."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional


@dataclass
class ProcessResult:
    """Outcome of one command."""

    returncode: int
    stdout: str
    stderr: str
    command: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.returncode == 0

    @property
    def error_output(self) -> str:
        """stderr, or stdout when a tool reports failures there."""
        return (self.stderr or self.stdout).strip()


class ProcessRunner(ABC):
    """Runs commands on behalf of the plugin fetcher.

    Implementations raise ``FileNotFoundError`` when the executable is
    missing and ``subprocess.TimeoutExpired`` when ``timeout`` elapses.
    """

    @abstractmethod
    def run(
        self,
        command: List[str],
        capture_output: bool = True,
        timeout: Optional[int] = None,
        check: bool = False,
        cwd: Optional[Path] = None,
        env: Optional[Dict[str, str]] = None,
    ) -> ProcessResult:
        """Run ``command`` and return its exit status and output."""
