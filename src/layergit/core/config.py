"""Configuration loading.

Two sources, both read once per invocation:

- Environment variables, loaded into the immutable LgConfig.
- The ``.lg`` marker file at the working tree root, written by init/clone.
  It records which branch is the baseline and where the git metadata lives.
  It is bookkeeping only: excluded from git and from every tracked-file
  enumeration.
"""

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import tomlkit

MARKER_FILE_NAME = ".lg"


@dataclass(frozen=True)
class LgConfig:
    """Configuration loaded from environment variables."""

    remote_dir: Path | None  # LG_REMOTE_DIR: out-of-tree metadata prefix
    p4_executable: str  # LG_P4
    debug: bool  # LG_DEBUG

    @staticmethod
    def from_env(environ: Mapping[str, str] | None = None) -> "LgConfig":
        """Load configuration from environment variables."""
        env = environ if environ is not None else os.environ
        remote_dir = env.get("LG_REMOTE_DIR", "").strip()
        return LgConfig(
            remote_dir=Path(remote_dir).expanduser() if remote_dir else None,
            p4_executable=env.get("LG_P4", "p4"),
            debug=env.get("LG_DEBUG", "").lower() in ("1", "true", "yes"),
        )


@dataclass(frozen=True)
class MarkerFile:
    """Contents of the ``.lg`` marker file."""

    baseline_branch: str
    git_dir: Path
    created: str


def metadata_dir_for(root: Path, remote_dir: Path) -> Path:
    """Location of the out-of-tree git directory for a working tree.

    The absolute working tree path is mirrored under remote_dir so several
    working trees can share one metadata prefix.

    Example:
        >>> metadata_dir_for(Path("/home/me/src/proj"), Path("/backup/lg"))
        PosixPath('/backup/lg/home/me/src/proj.git')
    """
    relative = Path(*root.resolve().parts[1:])
    return remote_dir.resolve() / relative.parent / f"{relative.name}.git"


def read_marker(root: Path) -> MarkerFile | None:
    """Read the marker file at root, or None if it does not exist.

    Raises:
        ValueError: If the file exists but is malformed
    """
    marker_path = root / MARKER_FILE_NAME
    if not marker_path.is_file():
        return None

    data = tomllib.loads(marker_path.read_text(encoding="utf-8"))
    baseline_branch = data.get("baseline_branch")
    git_dir = data.get("git_dir")
    if not baseline_branch or not git_dir:
        raise ValueError(f"Malformed marker file {marker_path}: missing baseline_branch or git_dir")

    return MarkerFile(
        baseline_branch=baseline_branch,
        git_dir=Path(git_dir),
        created=str(data.get("created", "")),
    )


def write_marker(root: Path, *, baseline_branch: str, git_dir: Path) -> Path:
    """Write the marker file at root and return its path."""
    doc = tomlkit.document()
    doc.add(tomlkit.comment("layergit bookkeeping - not a project file"))
    doc["baseline_branch"] = baseline_branch
    doc["git_dir"] = str(git_dir)
    doc["created"] = datetime.now().isoformat(timespec="seconds")

    marker_path = root / MARKER_FILE_NAME
    with marker_path.open("w", encoding="utf-8") as f:
        tomlkit.dump(doc, f)
    return marker_path
