# Infrastructure Adapters Package
from .json_library import JsonLibraryRepository

__all__ = ["JsonLibraryRepository"]
