"""Live preview staging and synchronization."""

from .mirror import MirrorSynchronizer, RegenerationState
from .session import PreviewSession
from .staging import StagingArea

__all__ = ["MirrorSynchronizer", "PreviewSession", "RegenerationState", "StagingArea"]
