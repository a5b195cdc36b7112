"""Domain entities package."""
from .photo import DetectedFace, PhotoEvent

__all__ = ["DetectedFace", "PhotoEvent"]
