from .base import Base
from .folder import Folder
from .note import Note

__all__ = ["Base", "Folder", "Note"]
