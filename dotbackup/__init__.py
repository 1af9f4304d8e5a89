"""dotbackup — inventory and selective backup of a Mac before a factory reset."""

__version__ = "0.1.0"
