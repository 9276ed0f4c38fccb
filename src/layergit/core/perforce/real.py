"""Production Perforce implementation using the p4 command line client."""

import logging
import shutil
import subprocess
from pathlib import Path

from layergit.core.perforce.abc import P4Result, Perforce
from layergit.core.subprocess import run_subprocess_with_context

logger = logging.getLogger(__name__)


class RealPerforce(Perforce):
    """Production implementation shelling out to p4.

    Commands run with ``-s`` so that every output line is tagged with its
    severity; p4 exits 0 for many per-file errors, so success is judged from
    the absence of ``error:`` lines rather than from the exit code alone.

    p4 reads its working directory from ``PWD`` rather than from the process,
    so every command also passes it explicitly with ``-d``.
    """

    def __init__(self, executable: str = "p4") -> None:
        self._executable = executable

    def is_available(self) -> bool:
        return shutil.which(self._executable) is not None

    def get_client_root(self, cwd: Path) -> Path | None:
        result = run_subprocess_with_context(
            [self._executable, "-d", str(cwd), "info"],
            operation_context="query perforce client info",
            cwd=cwd,
            check=False,
        )
        if result.returncode != 0:
            return None

        for line in result.stdout.splitlines():
            if line.startswith("Client root:"):
                root = line.split(":", 1)[1].strip()
                if root and root != "null":
                    return Path(root)
        return None

    def edit(self, cwd: Path, path: str) -> P4Result:
        return self._run(cwd, ["edit", path])

    def add(self, cwd: Path, path: str) -> P4Result:
        return self._run(cwd, ["add", path])

    def delete(self, cwd: Path, path: str) -> P4Result:
        return self._run(cwd, ["delete", path])

    def move(self, cwd: Path, from_path: str, to_path: str) -> P4Result:
        # -k: git has already renamed the file in the workspace
        return self._run(cwd, ["move", "-k", from_path, to_path])

    def _run(self, cwd: Path, args: list[str]) -> P4Result:
        cmd = [self._executable, "-d", str(cwd), "-s", *args]
        logger.debug("Running %s (cwd=%s)", " ".join(cmd), cwd)
        try:
            result = subprocess.run(cmd, cwd=cwd, capture_output=True, text=True, check=False)
        except FileNotFoundError:
            return P4Result(success=False, output=f"{self._executable}: command not found")

        output = (result.stdout + result.stderr).strip()
        has_error = any(line.startswith("error:") for line in output.splitlines())
        return P4Result(success=result.returncode == 0 and not has_error, output=output)
