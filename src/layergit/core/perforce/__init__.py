from layergit.core.perforce.abc import P4Result, Perforce
from layergit.core.perforce.dry_run import DryRunPerforce
from layergit.core.perforce.real import RealPerforce

__all__ = ["DryRunPerforce", "P4Result", "Perforce", "RealPerforce"]
