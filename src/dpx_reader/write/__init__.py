from .tiff_export import write_subimage_tiff

__all__ = ["write_subimage_tiff"]
