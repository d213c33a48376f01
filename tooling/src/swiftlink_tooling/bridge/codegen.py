"""Render C headers and Swift glue for parsed bridge modules.

Output is a pure function of the parsed modules so regenerating unchanged
inputs yields identical bytes.
"""

from __future__ import annotations

from collections.abc import Sequence

from swiftlink_tooling.bridge.model import RUST, SWIFT, BridgeFunction, BridgeModule, BridgeType

GENERATED_BANNER = "// File automatically generated by swiftlink. Do not edit."

CORE_HEADER = f"""{GENERATED_BANNER}
#include <stdint.h>
#include <stdbool.h>
"""

CORE_SWIFT = f"""{GENERATED_BANNER}
public protocol SwiftBridgeOpaque: AnyObject {{
    var ptr: UnsafeMutableRawPointer {{ get }}
    var isOwned: Bool {{ get set }}
}}

extension SwiftBridgeOpaque {{
    /// Hand the Rust value back to Rust; deinit will no longer free it.
    public func releaseOwnership() -> UnsafeMutableRawPointer {{
        isOwned = false
        return ptr
    }}
}}
"""


def _free_symbol(type_name: str) -> str:
    return f"__swift_bridge__${type_name}$_free"


def _c_return(fn: BridgeFunction) -> str:
    return fn.returns.c_type if fn.returns else "void"


def _c_params(fn: BridgeFunction) -> str:
    params: list[str] = []
    if fn.receiver:
        params.append("void* self")
    params.extend(f"{p.type.c_type} {p.name}" for p in fn.params)
    return ", ".join(params) if params else "void"


def render_c_header(modules: Sequence[BridgeModule]) -> str:
    lines = [GENERATED_BANNER]
    for module in modules:
        lines.append(f"// mod {module.name}")
        for block in module.blocks_for(RUST):
            for t in block.types:
                lines.append(f"typedef struct {t} {t};")
                lines.append(f"void {_free_symbol(t)}(void* self);")
            for fn in block.functions:
                lines.append(f"{_c_return(fn)} {fn.symbol}({_c_params(fn)});")
    return "\n".join(lines) + "\n"


def _swift_arg(t: BridgeType, expr: str) -> str:
    if t.is_primitive:
        return expr
    if t.ref:
        return f"{expr}.ptr"
    return f"{expr}.releaseOwnership()"


def _swift_params(fn: BridgeFunction) -> str:
    return ", ".join(f"_ {p.name}: {p.type.swift_type}" for p in fn.params)


def _swift_call(fn: BridgeFunction) -> str:
    args: list[str] = []
    if fn.receiver == "self":
        args.append("releaseOwnership()")
    elif fn.receiver:
        args.append("ptr")
    args.extend(_swift_arg(p.type, p.name) for p in fn.params)
    return f"{fn.symbol}({', '.join(args)})"


def _swift_return_expr(fn: BridgeFunction) -> str:
    call = _swift_call(fn)
    if fn.returns is not None and fn.returns.is_opaque:
        return f"{fn.returns.name}(ptr: {call})"
    return call


def _swift_signature(fn: BridgeFunction) -> str:
    ret = f" -> {fn.returns.swift_type}" if fn.returns else ""
    return f"public func {fn.name}({_swift_params(fn)}){ret}"


def _render_class(type_name: str) -> list[str]:
    return [
        f"public class {type_name}: SwiftBridgeOpaque {{",
        "    public var ptr: UnsafeMutableRawPointer",
        "    public var isOwned: Bool = true",
        "",
        "    public init(ptr: UnsafeMutableRawPointer) {",
        "        self.ptr = ptr",
        "    }",
        "",
        "    deinit {",
        "        if isOwned {",
        f"            {_free_symbol(type_name)}(ptr)",
        "        }",
        "    }",
        "}",
    ]


def _render_extension(type_name: str, members: list[BridgeFunction]) -> list[str]:
    lines = [f"extension {type_name} {{"]
    for i, fn in enumerate(members):
        if i:
            lines.append("")
        if fn.is_init:
            lines.append(f"    public convenience init({_swift_params(fn)}) {{")
            lines.append(f"        self.init(ptr: {_swift_call(fn)})")
        else:
            lines.append(f"    {_swift_signature(fn)} {{")
            lines.append(f"        {_swift_return_expr(fn)}")
        lines.append("    }")
    lines.append("}")
    return lines


def _render_swift_export(fn: BridgeFunction) -> list[str]:
    params = ", ".join(f"_ {p.name}: {p.type.swift_type}" for p in fn.params)
    ret = f" -> {fn.returns.swift_type}" if fn.returns else ""
    labels = ", ".join(f"{p.name}: {p.name}" for p in fn.params)
    return [
        f'@_cdecl("{fn.symbol}")',
        f"func __swift_bridge__{fn.name} ({params}){ret} {{",
        f"    {fn.name}({labels})",
        "}",
    ]


def render_swift(modules: Sequence[BridgeModule]) -> str:
    chunks: list[list[str]] = []
    for module in modules:
        for block in module.blocks_for(RUST):
            members: dict[str, list[BridgeFunction]] = {t: [] for t in block.types}
            for fn in block.functions:
                if fn.owner is None:
                    chunks.append(
                        [f"{_swift_signature(fn)} {{", f"    {_swift_return_expr(fn)}", "}"]
                    )
                else:
                    members.setdefault(fn.owner, []).append(fn)
            for type_name, fns in members.items():
                if type_name in block.types:
                    chunks.append(_render_class(type_name))
                if fns:
                    chunks.append(_render_extension(type_name, fns))
        for block in module.blocks_for(SWIFT):
            chunks.extend(_render_swift_export(fn) for fn in block.functions)
    body = "\n\n".join("\n".join(c) for c in chunks)
    return f"{GENERATED_BANNER}\n{body}\n" if body else f"{GENERATED_BANNER}\n"
