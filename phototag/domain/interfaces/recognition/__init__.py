"""Face recognition interfaces."""
from .face_collection import FaceCollection

__all__ = ["FaceCollection"]
