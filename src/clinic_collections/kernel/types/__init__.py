"""Kernel types – Entity and dotted key-path access."""
from clinic_collections.kernel.types.entity import Entity, get_path, set_path

__all__ = ["Entity", "get_path", "set_path"]
