"""Subprocess process runner implementation."""

import os
import subprocess
from pathlib import Path
from typing import Dict, List, Optional

from ..interfaces.process import ProcessResult, ProcessRunner


class SubprocessRunner(ProcessRunner):
    """Run processes using the subprocess module."""

    # Never let git block on a credential or host-key prompt
    NON_INTERACTIVE_ENV = {"GIT_TERMINAL_PROMPT": "0"}

    def run(
        self,
        command: List[str],
        capture_output: bool = True,
        timeout: Optional[int] = None,
        check: bool = False,
        cwd: Optional[Path] = None,
        env: Optional[Dict[str, str]] = None,
    ) -> ProcessResult:
        """Run a command."""
        merged_env = {**os.environ, **self.NON_INTERACTIVE_ENV, **(env or {})}
        result = subprocess.run(
            command,
            capture_output=capture_output,
            timeout=timeout,
            check=check,
            cwd=str(cwd) if cwd else None,
            env=merged_env,
            stdin=subprocess.DEVNULL,
            text=True,
        )
        return ProcessResult(
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            command=list(command),
        )
