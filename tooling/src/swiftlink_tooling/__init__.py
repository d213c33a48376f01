"""Build a Swift static library for cargo and link it into the crate."""

__version__ = "0.1.0"
