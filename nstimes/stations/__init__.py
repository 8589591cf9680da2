"""Station directory: the static station table and text matching."""

from .directory import (
    StationDirectory,
    canonicalize,
    load_directory,
    to_lookup,
    write_directory,
)

__all__ = [
    "StationDirectory",
    "canonicalize",
    "load_directory",
    "to_lookup",
    "write_directory",
]
