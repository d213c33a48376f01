"""Parsed bridge module declarations and the Rust -> C / Swift type tables."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

# rust name -> (C type, Swift type)
PRIMITIVES: dict[str, tuple[str, str]] = {
    "u8": ("uint8_t", "UInt8"),
    "i8": ("int8_t", "Int8"),
    "u16": ("uint16_t", "UInt16"),
    "i16": ("int16_t", "Int16"),
    "u32": ("uint32_t", "UInt32"),
    "i32": ("int32_t", "Int32"),
    "u64": ("uint64_t", "UInt64"),
    "i64": ("int64_t", "Int64"),
    "usize": ("uintptr_t", "UInt"),
    "isize": ("intptr_t", "Int"),
    "f32": ("float", "Float"),
    "f64": ("double", "Double"),
    "bool": ("bool", "Bool"),
}

RUST = "Rust"
SWIFT = "Swift"


@dataclass(frozen=True)
class BridgeType:
    """A parameter or return type. ref is "", "&" or "&mut"."""

    name: str
    ref: str = ""

    @property
    def is_primitive(self) -> bool:
        return self.name in PRIMITIVES

    @property
    def is_opaque(self) -> bool:
        return not self.is_primitive

    @property
    def c_type(self) -> str:
        return PRIMITIVES[self.name][0] if self.is_primitive else "void*"

    @property
    def swift_type(self) -> str:
        return PRIMITIVES[self.name][1] if self.is_primitive else self.name


@dataclass(frozen=True)
class Param:
    name: str
    type: BridgeType


@dataclass(frozen=True)
class BridgeFunction:
    name: str
    params: tuple[Param, ...] = ()
    returns: BridgeType | None = None
    # "self", "&self" or "&mut self" for methods
    receiver: str | None = None
    owner: str | None = None
    is_init: bool = False

    @property
    def symbol(self) -> str:
        if self.owner:
            return f"__swift_bridge__${self.owner}${self.name}"
        return f"__swift_bridge__${self.name}"


@dataclass(frozen=True)
class ExternBlock:
    language: str
    types: tuple[str, ...] = ()
    functions: tuple[BridgeFunction, ...] = ()


@dataclass(frozen=True)
class BridgeModule:
    name: str
    source: Path
    blocks: tuple[ExternBlock, ...] = field(default_factory=tuple)

    def blocks_for(self, language: str) -> list[ExternBlock]:
        return [b for b in self.blocks if b.language == language]

    @property
    def opaque_types(self) -> list[str]:
        return [t for b in self.blocks_for(RUST) for t in b.types]
