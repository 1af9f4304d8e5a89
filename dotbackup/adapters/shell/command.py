"""
Shell command adapter — run one program with an argv list.

Everything that is not git goes through here: ``brew``, ``zip``,
``rsync``, ``defaults``, ``du`` and the machine probes (``scutil``,
``sw_vers``, ``sysctl``). No shell is involved; argv is executed as-is.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

from dotbackup.adapters.base import Adapter, ExecutionContext
from dotbackup.core.models.action import Receipt

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 300


class ShellCommandAdapter(Adapter):
    """Run a command and capture stdout/stderr.

    Action params:
        argv (list[str]): Program and arguments.
        cwd (str): Working directory (default: the context's).
        timeout (int | None): Seconds; ``None`` waits forever. Defaults to
            300, or no limit when interactive.
        interactive (bool): Leave stdin/stdout/stderr attached to the
            terminal, for programs that prompt (``zip -e``). Output is
            not captured.
    """

    @property
    def name(self) -> str:
        return "shell"

    def is_available(self) -> bool:
        return True

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        argv = context.param("argv")
        if not argv or not isinstance(argv, list):
            return False, "Missing required param: 'argv'"
        if not Path(context.cwd).is_dir():
            return False, f"Working directory does not exist: {context.cwd}"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        argv = [str(a) for a in context.param("argv")]
        interactive = bool(context.param("interactive", False))
        timeout = context.param("timeout", None if interactive else DEFAULT_TIMEOUT)
        command = " ".join(argv)
        meta = {"command": command}

        if shutil.which(argv[0]) is None and not Path(argv[0]).is_file():
            return self.fail(context, f"Command not found: {argv[0]}", metadata={**meta, "missing": True})

        logger.debug("$ %s  (cwd=%s)", command, context.cwd)
        try:
            proc = subprocess.run(
                argv,
                cwd=context.cwd,
                capture_output=not interactive,
                text=True,
                timeout=timeout,
            )
        except FileNotFoundError:
            return self.fail(context, f"Command not found: {argv[0]}", metadata={**meta, "missing": True})
        except subprocess.TimeoutExpired:
            return self.fail(context, f"Command timed out after {timeout}s", metadata={**meta, "timeout": timeout})
        except OSError as e:
            return self.fail(context, f"Cannot run {argv[0]}: {e}", metadata=meta)

        stdout = (proc.stdout or "").strip()
        stderr = (proc.stderr or "").strip()
        meta["return_code"] = proc.returncode

        if proc.returncode != 0:
            logger.debug("%s exited %d: %s", argv[0], proc.returncode, stderr)
            return self.fail(
                context,
                stderr or f"{argv[0]} exited with code {proc.returncode}",
                metadata={**meta, "stdout": stdout},
            )
        return self.ok(context, stdout, metadata={**meta, "stderr": stderr})
