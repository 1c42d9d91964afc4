"""Kernel – errors, entity type and clock shared by every layer."""
