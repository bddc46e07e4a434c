from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

FUNC_DECL_RE = re.compile(
    r'^[^"\n]*?([a-z]+)\s+([a-zA-Z0-9_]+)\s*\(\s*((?:[a-z]+\s+[a-zA-Z0-9_]+\b\s*(?:,\s*)?)*)\)',
    re.MULTILINE,
)


@dataclass(frozen=True)
class FunctionSignature:
    return_type: str
    name: str
    parameters: Tuple[str, ...]
    start: int = 0

    @property
    def label(self) -> str:
        params = ", ".join(self.parameters)
        return f"{self.return_type} {self.name} ({params})"


def find_function_declarations(source: str) -> List[FunctionSignature]:
    """Collect ``<type> <name>(<type> <arg>, ...)`` declarations in source order.

    This is a line-anchored pattern match, not a parser: comments and string
    contents are not skipped. Text before the return type must sit on the same
    line and contain no double quote, and each parameter is one word pair, so
    an unterminated parameter list fails without exponential backtracking.
    """
    decls: list[FunctionSignature] = []
    for match in FUNC_DECL_RE.finditer(source):
        decls.append(
            FunctionSignature(
                return_type=match.group(1),
                name=match.group(2),
                parameters=_split_params(match.group(3)),
                start=match.start(1),
            )
        )
    return decls


def find_function(source: str, name: str) -> Optional[FunctionSignature]:
    for decl in find_function_declarations(source):
        if decl.name == name:
            return decl
    return None


def line_of_offset(source: str, offset: int) -> int:
    return source.count("\n", 0, offset)


def _split_params(raw: str) -> Tuple[str, ...]:
    params = (" ".join(part.split()) for part in raw.split(","))
    return tuple(param for param in params if param)
