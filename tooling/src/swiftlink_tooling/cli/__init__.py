"""Command line entry points for swiftlink."""
