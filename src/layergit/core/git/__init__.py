from layergit.core.git.abc import Git
from layergit.core.git.real import RealGit

__all__ = ["Git", "RealGit"]
