"""Error taxonomy for layergit operations.

Core code raises these; the CLI layer turns them into a single
``lg: <message>`` line on stderr and a non-zero exit.
"""


class LgError(Exception):
    """Base class for all layergit failures."""


class PreconditionError(LgError):
    """An operation was refused before any mutating command was issued."""


class EnvironmentFailure(LgError):
    """The legacy SCM cannot be used at all (missing binary, no client root)."""


class StashRestoreError(LgError):
    """Pending local edits could not be re-applied and need manual repair."""


class RebaseConflictError(LgError):
    """Rebasing the topic branch stopped on a conflict.

    The repository is left on the topic branch in git's own conflict state.
    If local edits were stashed, they are still on the stash.
    """

    def __init__(self, topic: str, baseline: str, *, stashed: bool) -> None:
        self.topic = topic
        self.baseline = baseline
        self.stashed = stashed
        message = (
            f"rebase of '{topic}' onto '{baseline}' stopped on conflicts; "
            "resolve them and run 'git rebase --continue'"
        )
        if stashed:
            message += ", then 'git stash pop' to restore your uncommitted edits"
        super().__init__(message)
