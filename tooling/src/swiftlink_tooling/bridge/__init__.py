"""Swift <-> Rust bridge glue: parse #[swift_bridge::bridge] modules, write headers and Swift."""

from .generate import (
    BridgeArtifacts,
    bridging_header_text,
    generate_bridges,
    write_all_concatenated,
    write_bridging_header,
)
from .parse import parse_bridges, parse_source

__all__ = [
    "BridgeArtifacts",
    "bridging_header_text",
    "generate_bridges",
    "parse_bridges",
    "parse_source",
    "write_all_concatenated",
    "write_bridging_header",
]
