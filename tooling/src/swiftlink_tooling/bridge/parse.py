"""Parse `#[swift_bridge::bridge] mod ... { extern "Rust" {...} extern "Swift" {...} }` blocks.

Supports opaque Rust types, free functions, methods (self, &self, &mut self,
or an explicit `self: &Type`), and `#[swift_bridge(init)]` constructors.
Parameter and return types are Rust primitives, bool, () or opaque Rust types.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path

from swiftlink_tooling.bridge.model import (
    PRIMITIVES,
    RUST,
    SWIFT,
    BridgeFunction,
    BridgeModule,
    BridgeType,
    ExternBlock,
    Param,
)
from swiftlink_tooling.errors import BridgeParseError

_MODULE_RE = re.compile(
    r"#\[\s*swift_bridge::bridge\s*(?:\([^)]*\))?\s*\]\s*"
    r"(?:#\[[^\]]*\]\s*)*"
    r"(?:pub(?:\([^)]*\))?\s+)?mod\s+(\w+)\s*\{"
)
_EXTERN_RE = re.compile(r'(?:unsafe\s+)?extern\s+"(\w+)"\s*\{')
_ATTR_RE = re.compile(r"^#\[\s*([^\]]*?)\s*\]\s*")
_TYPE_RE = re.compile(r"^(?:pub\s+)?type\s+(\w+)$")
_FN_RE = re.compile(r"^(?:pub\s+)?(?:unsafe\s+)?fn\s+(\w+)\s*\((.*)\)\s*(?:->\s*(.+))?$", re.DOTALL)
_SELF_RE = re.compile(r"^(&\s*mut\s+|&\s*)?self(?:\s*:\s*(&\s*mut\s+|&\s*)?(\w+))?$")
_IDENT_RE = re.compile(r"^\w+$")


def strip_comments(src: str) -> str:
    """Remove // and /* */ comments, leaving string literals intact."""
    out: list[str] = []
    i = 0
    n = len(src)
    while i < n:
        ch = src[i]
        if ch == '"':
            j = i + 1
            while j < n and src[j] != '"':
                j += 2 if src[j] == "\\" else 1
            out.append(src[i : j + 1])
            i = j + 1
        elif src.startswith("'\"'", i):
            out.append("'\"'")
            i += 3
        elif src.startswith("//", i):
            j = src.find("\n", i)
            i = n if j == -1 else j
        elif src.startswith("/*", i):
            j = src.find("*/", i + 2)
            i = n if j == -1 else j + 2
            out.append(" ")
        else:
            out.append(ch)
            i += 1
    return "".join(out)


def _matching_brace(src: str, open_idx: int) -> int:
    """Index of the } closing the { at open_idx, or -1."""
    depth = 0
    for i in range(open_idx, len(src)):
        if src[i] == "{":
            depth += 1
        elif src[i] == "}":
            depth -= 1
            if depth == 0:
                return i
    return -1


def _split_top_level(text: str, sep: str) -> list[str]:
    parts: list[str] = []
    depth = 0
    start = 0
    for i, ch in enumerate(text):
        if ch in "([<":
            depth += 1
        elif ch in ")]>" and not (ch == ">" and text[i - 1 : i] == "-"):
            depth -= 1
        elif ch == sep and depth == 0:
            parts.append(text[start:i])
            start = i + 1
    parts.append(text[start:])
    return [p.strip() for p in parts if p.strip()]


class _Parser:
    def __init__(self, source: Path) -> None:
        self.source = source

    def error(self, what: str, decl: str = "") -> BridgeParseError:
        where = f"{self.source}"
        if decl:
            where += f": {' '.join(decl.split())}"
        return BridgeParseError(f"{what} ({where})")

    def parse_module(self, name: str, body: str) -> BridgeModule:
        raw_blocks: list[tuple[str, str]] = []
        rest: list[str] = []
        pos = 0
        while True:
            m = _EXTERN_RE.search(body, pos)
            if not m:
                rest.append(body[pos:])
                break
            rest.append(body[pos : m.start()])
            close = _matching_brace(body, m.end() - 1)
            if close == -1:
                raise self.error(f'unclosed extern "{m.group(1)}" block in mod {name}')
            raw_blocks.append((m.group(1), body[m.end() : close]))
            pos = close + 1
        leftover = "".join(rest).strip()
        if leftover:
            raise self.error(f"unsupported item in mod {name}", leftover[:80])

        opaque = [
            t for lang, text in raw_blocks if lang == RUST for t in self._declared_types(text)
        ]
        blocks = tuple(self.parse_block(lang, text, opaque) for lang, text in raw_blocks)
        return BridgeModule(name=name, source=self.source, blocks=blocks)

    def _declared_types(self, text: str) -> list[str]:
        out: list[str] = []
        for item in _split_top_level(text, ";"):
            _attrs, decl = self._take_attrs(item)
            m = _TYPE_RE.match(decl)
            if m:
                out.append(m.group(1))
        return out

    def _take_attrs(self, item: str) -> tuple[list[str], str]:
        attrs: list[str] = []
        while True:
            m = _ATTR_RE.match(item)
            if not m:
                return attrs, item.strip()
            attrs.append(m.group(1))
            item = item[m.end() :]

    def parse_block(self, language: str, text: str, opaque: list[str]) -> ExternBlock:
        if language not in (RUST, SWIFT):
            raise self.error(f'unsupported extern "{language}" block')
        if "{" in text:
            raise self.error(f'function bodies are not allowed in extern "{language}"')
        types: list[str] = []
        decls: list[tuple[list[str], str]] = []
        for item in _split_top_level(text, ";"):
            attrs, decl = self._take_attrs(item)
            m = _TYPE_RE.match(decl)
            if m:
                if language == SWIFT:
                    raise self.error("opaque Swift types are not supported", decl)
                types.append(m.group(1))
            else:
                decls.append((attrs, decl))
        functions = tuple(
            self.parse_function(language, attrs, decl, types, opaque) for attrs, decl in decls
        )
        return ExternBlock(language=language, types=tuple(types), functions=functions)

    def parse_type(self, text: str, opaque: list[str], decl: str) -> BridgeType | None:
        t = " ".join(text.split())
        if t == "()":
            return None
        ref = ""
        if t.startswith("&mut "):
            ref, t = "&mut", t[5:].strip()
        elif t.startswith("&"):
            ref, t = "&", t[1:].strip()
        if t in PRIMITIVES:
            if ref:
                raise self.error(f"references to primitive {t} are not supported", decl)
            return BridgeType(t)
        if t in opaque:
            return BridgeType(t, ref)
        raise self.error(f"unsupported type {text.strip()!r}", decl)

    def _attr_flags(self, attrs: list[str], decl: str) -> set[str]:
        flags: set[str] = set()
        for a in attrs:
            m = re.match(r"^swift_bridge\s*\((.*)\)$", a, re.DOTALL)
            if not m:
                continue
            for flag in _split_top_level(m.group(1), ","):
                if flag != "init":
                    raise self.error(f"unsupported swift_bridge attribute {flag!r}", decl)
                flags.add(flag)
        return flags

    def parse_function(
        self,
        language: str,
        attrs: list[str],
        decl: str,
        block_types: list[str],
        opaque: list[str],
    ) -> BridgeFunction:
        m = _FN_RE.match(decl)
        if not m:
            raise self.error("expected `type Name` or `fn name(...)`", decl)
        name, params_text, ret_text = m.group(1), m.group(2), m.group(3)
        is_init = "init" in self._attr_flags(attrs, decl)
        known = opaque if language == RUST else []

        receiver: str | None = None
        owner: str | None = None
        params: list[Param] = []
        for idx, p in enumerate(_split_top_level(params_text, ",")):
            sm = _SELF_RE.match(" ".join(p.split()))
            if sm:
                if idx != 0 or language != RUST:
                    raise self.error("self is only allowed first, in extern \"Rust\"", decl)
                receiver, owner = self._receiver(sm, block_types, opaque, decl)
                continue
            if ":" not in p:
                raise self.error(f"expected `name: Type`, got {p!r}", decl)
            pname, ptype = (s.strip() for s in p.split(":", 1))
            if not _IDENT_RE.match(pname):
                raise self.error(f"unsupported parameter pattern {pname!r}", decl)
            bt = self.parse_type(ptype, known, decl)
            if bt is None:
                raise self.error(f"parameter {pname} cannot be ()", decl)
            params.append(Param(pname, bt))

        returns = self.parse_type(ret_text, known, decl) if ret_text else None
        if returns is not None and returns.ref:
            raise self.error("returning references is not supported", decl)
        if is_init:
            if receiver is not None or returns is None or not returns.is_opaque:
                raise self.error("#[swift_bridge(init)] must return an opaque type", decl)
            owner = returns.name
        return BridgeFunction(
            name=name,
            params=tuple(params),
            returns=returns,
            receiver=receiver,
            owner=owner,
            is_init=is_init,
        )

    def _receiver(
        self,
        sm: re.Match[str],
        block_types: list[str],
        opaque: list[str],
        decl: str,
    ) -> tuple[str, str]:
        short_ref, typed_ref, typed_name = sm.group(1), sm.group(2), sm.group(3)
        ref = " ".join((short_ref or typed_ref or "").split())
        receiver = f"{ref} self" if ref else "self"
        receiver = receiver.replace("& ", "&")
        if typed_name:
            if typed_name not in opaque:
                raise self.error(f"self type {typed_name} is not declared", decl)
            return receiver, typed_name
        if len(block_types) != 1:
            raise self.error(
                "bare self needs exactly one type in the block; use `self: &Type`", decl
            )
        return receiver, block_types[0]


def parse_source(src: str, source: Path) -> list[BridgeModule]:
    """All bridge modules in one Rust source, in order."""
    text = strip_comments(src)
    parser = _Parser(source)
    modules: list[BridgeModule] = []
    pos = 0
    while True:
        m = _MODULE_RE.search(text, pos)
        if not m:
            return modules
        close = _matching_brace(text, m.end() - 1)
        if close == -1:
            raise parser.error(f"unclosed bridge module {m.group(1)}")
        modules.append(parser.parse_module(m.group(1), text[m.end() : close]))
        pos = close + 1


def parse_bridges(paths: Iterable[Path]) -> list[BridgeModule]:
    """Parse bridge modules from each file in order. Raises BridgeParseError."""
    modules: list[BridgeModule] = []
    for path in paths:
        try:
            src = path.read_text()
        except OSError as e:
            msg = f"Could not read bridge file {path}: {e}"
            raise BridgeParseError(msg) from e
        modules.extend(parse_source(src, path))
    return modules
