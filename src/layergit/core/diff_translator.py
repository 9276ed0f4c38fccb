"""Translate git's unified diff output into file-level changes.

The translator is a small line-oriented parser over ``git diff`` output. A new
file section starts at every ``diff --git`` header; the extended header lines
that follow (``new file mode``, ``deleted file mode``, ``rename from`` /
``rename to``, ``---`` / ``+++``) decide what happened to the file. Hunk bodies
are skipped.

Two output modes exist because the two consumers need different granularity:

- "status": one record per touched path. A rename is reported as an edit of
  the new path.
- "export": a rename becomes an edit of the old path immediately followed by a
  move record, because Perforce needs a file opened for edit before it can be
  moved.

Anything the parser does not recognise raises DiffParseError rather than
being guessed at.
"""

import re
from dataclasses import dataclass
from typing import Literal

ChangeKind = Literal["add", "edit", "delete", "move"]
TranslateMode = Literal["status", "export"]

_HEADER_PREFIX = "diff --git "
_HUNK_HEADER = re.compile(r"^@@ -\d+(?:,\d+)? \+\d+(?:,\d+)? @@")
_IGNORED_HEADER_PREFIXES = (
    "index ",
    "old mode ",
    "new mode ",
    "similarity index ",
    "dissimilarity index ",
    "Binary files ",
)


class DiffParseError(ValueError):
    """Raised when diff text does not have the structure git produces."""


@dataclass(frozen=True)
class FileChange:
    """A normalized file-level change.

    For kind "move", ``path`` is the destination and ``from_path`` the source.
    """

    path: str
    kind: ChangeKind
    from_path: str | None = None

    def describe(self) -> str:
        """Render as ``<verb> <path>`` (``move <from> <to>`` for moves)."""
        if self.kind == "move":
            return f"move {self.from_path} {self.path}"
        return f"{self.kind} {self.path}"


@dataclass
class _Section:
    header: str
    old_path: str | None = None
    new_path: str | None = None
    rename_from: str | None = None
    rename_to: str | None = None
    copy_to: str | None = None
    created: bool = False
    deleted: bool = False
    in_hunk: bool = False


def translate(diff_text: str, mode: TranslateMode) -> list[FileChange]:
    """Translate unified diff text into an ordered list of FileChange records.

    Args:
        diff_text: Output of ``git diff`` between two revisions
        mode: "status" or "export" (see module docstring)

    Returns:
        Changes in the order their sections appear in the diff

    Raises:
        DiffParseError: If the text is not a git-style unified diff
    """
    if mode not in ("status", "export"):
        raise ValueError(f"Unknown translate mode: {mode}")

    changes: list[FileChange] = []
    section: _Section | None = None

    for line_number, line in enumerate(diff_text.splitlines(), start=1):
        if line.startswith(_HEADER_PREFIX):
            if section is not None:
                changes.extend(_finish_section(section, mode))
            section = _Section(header=line[len(_HEADER_PREFIX) :])
            continue

        if section is None:
            if line.strip():
                raise DiffParseError(
                    f"line {line_number}: expected a 'diff --git' header, got {line!r}"
                )
            continue

        _consume_line(section, line, line_number)

    if section is not None:
        changes.extend(_finish_section(section, mode))

    return changes


def _consume_line(section: _Section, line: str, line_number: int) -> None:
    if section.in_hunk:
        if line == "" or line[0] in " +-\\":
            return
        if _HUNK_HEADER.match(line):
            return
        raise DiffParseError(f"line {line_number}: unexpected line in hunk: {line!r}")

    if _HUNK_HEADER.match(line):
        section.in_hunk = True
    elif line.startswith("new file mode "):
        section.created = True
    elif line.startswith("deleted file mode "):
        section.deleted = True
    elif line.startswith("rename from "):
        section.rename_from = _unquote(line[len("rename from ") :])
    elif line.startswith("rename to "):
        section.rename_to = _unquote(line[len("rename to ") :])
    elif line.startswith("copy from "):
        pass
    elif line.startswith("copy to "):
        section.copy_to = _unquote(line[len("copy to ") :])
    elif line.startswith("--- "):
        section.old_path = _strip_prefix(_unquote(line[4:]), "a/")
    elif line.startswith("+++ "):
        section.new_path = _strip_prefix(_unquote(line[4:]), "b/")
    elif line.startswith(_IGNORED_HEADER_PREFIXES) or line == "":
        pass
    else:
        raise DiffParseError(f"line {line_number}: unrecognised diff header line: {line!r}")


def _finish_section(section: _Section, mode: TranslateMode) -> list[FileChange]:
    if section.rename_from is not None or section.rename_to is not None:
        if section.rename_from is None or section.rename_to is None:
            raise DiffParseError(f"incomplete rename in section 'diff --git {section.header}'")
        if mode == "status":
            return [FileChange(path=section.rename_to, kind="edit")]
        return [
            FileChange(path=section.rename_from, kind="edit"),
            FileChange(path=section.rename_to, kind="move", from_path=section.rename_from),
        ]

    if section.copy_to is not None:
        return [FileChange(path=section.copy_to, kind="add")]

    old_path, new_path = _section_paths(section)
    if section.created:
        return [FileChange(path=new_path, kind="add")]
    if section.deleted:
        return [FileChange(path=old_path, kind="delete")]
    return [FileChange(path=new_path, kind="edit")]


def _section_paths(section: _Section) -> tuple[str, str]:
    """Resolve old and new paths, preferring ---/+++ lines over the header."""
    old_path = section.old_path if section.old_path != "/dev/null" else None
    new_path = section.new_path if section.new_path != "/dev/null" else None
    if old_path is not None or new_path is not None:
        return (old_path or new_path or "", new_path or old_path or "")

    header_old, header_new = _split_header(section.header)
    return (header_old, header_new)


def _split_header(header: str) -> tuple[str, str]:
    """Split the ``a/<old> b/<new>`` part of a diff header.

    Without a rename the two paths are identical, which makes an unquoted
    header with spaces unambiguous: it must read ``a/P b/P``.
    """
    if header.startswith('"'):
        old_token, rest = _read_quoted(header)
        new_token = _unquote(rest.strip())
        return (_strip_prefix(old_token, "a/"), _strip_prefix(new_token, "b/"))

    if (len(header) - 1) % 2 == 0:
        split_at = (len(header) - 1) // 2
        old_token = header[:split_at]
        separator = header[split_at : split_at + 3]
        new_token = header[split_at + 3 :]
        if (
            separator == " b/"
            and old_token.startswith("a/")
            and old_token[2:] == new_token
        ):
            return (old_token[2:], new_token)

    raise DiffParseError(f"cannot determine paths from header 'diff --git {header}'")


def _strip_prefix(path: str, prefix: str) -> str:
    if path == "/dev/null":
        return path
    if not path.startswith(prefix):
        raise DiffParseError(f"expected path starting with '{prefix}', got {path!r}")
    return path[len(prefix) :]


def _unquote(token: str) -> str:
    """Undo git's C-style quoting of paths with special characters."""
    token = token.rstrip("\t")
    if not token.startswith('"'):
        return token
    value, rest = _read_quoted(token)
    if rest.strip():
        raise DiffParseError(f"trailing text after quoted path: {token!r}")
    return value


def _read_quoted(text: str) -> tuple[str, str]:
    """Read one double-quoted token from text, returning (value, remainder)."""
    raw = bytearray()
    index = 1
    escapes = {"a": 7, "b": 8, "t": 9, "n": 10, "v": 11, "f": 12, "r": 13, '"': 34, "\\": 92}
    while index < len(text):
        char = text[index]
        if char == '"':
            return (raw.decode("utf-8", errors="surrogateescape"), text[index + 1 :])
        if char == "\\":
            escaped = text[index + 1 : index + 2]
            if escaped in escapes:
                raw.append(escapes[escaped])
                index += 2
                continue
            octal = text[index + 1 : index + 4]
            if len(octal) == 3 and all(c in "01234567" for c in octal):
                raw.append(int(octal, 8))
                index += 4
                continue
            raise DiffParseError(f"invalid escape in quoted path: {text!r}")
        raw.extend(char.encode("utf-8"))
        index += 1
    raise DiffParseError(f"unterminated quoted path: {text!r}")
