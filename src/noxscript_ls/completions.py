from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from lsprotocol import types

from .lexical import count_quotes, word_at
from .parser import find_function, find_function_declarations
from .registry import BuiltinRegistry

log = logging.getLogger(__name__)

KEYWORDS: tuple[str, ...] = (
    "if",
    "else",
    "int",
    "float",
    "string",
    "object",
    "goto",
    "return",
    "continue",
    "break",
    "while",
    "for",
    "void",
    "self",
    "other",
    "true",
    "false",
)


@dataclass
class Suggestion:
    name: str
    kind: types.CompletionItemKind
    detail: str = ""
    documentation: str = ""


def gather_suggestions(builtins: BuiltinRegistry, keywords: Sequence[str] = KEYWORDS) -> List[Suggestion]:
    """Static suggestions: keywords followed by builtin functions."""
    suggestions: list[Suggestion] = []
    for keyword in keywords:
        suggestions.append(Suggestion(name=keyword, kind=types.CompletionItemKind.Keyword, detail=keyword))
    for entry in builtins.values():
        suggestions.append(
            Suggestion(
                name=entry.name,
                kind=types.CompletionItemKind.Function,
                detail=entry.text,
                documentation=entry.brief,
            )
        )
    return suggestions


def completion_items(
    code: str,
    builtins: BuiltinRegistry,
    keywords: Sequence[str] = KEYWORDS,
) -> List[types.CompletionItem]:
    # The client filters by prefix; every candidate is returned.
    suggestions = gather_suggestions(builtins, keywords)
    for decl in find_function_declarations(code):
        suggestions.append(Suggestion(name=decl.name, kind=types.CompletionItemKind.Function, detail=decl.label))
    return _to_items(suggestions)


def resolve_completion_item(item: types.CompletionItem) -> types.CompletionItem:
    return item


def hover_for_offset(
    code: str,
    offset: int,
    builtins: BuiltinRegistry,
    language: str = "ns",
) -> Optional[types.Hover]:
    if count_quotes(code, offset) % 2 != 0:
        return None
    word = word_at(code, offset)
    if not word:
        return None

    builtin = builtins.lookup(word)
    if builtin is not None:
        log.debug("Hover: builtin %s", word)
        contents = _fenced(builtin.text, language)
        for extra in (builtin.brief, builtin.detail):
            if extra:
                contents += f"\n\n{extra}"
        return _markdown_hover(contents)

    decl = find_function(code, word)
    if decl is not None:
        log.debug("Hover: declared function %s", word)
        return _markdown_hover(_fenced(decl.label, language))
    return None


def _to_items(suggestions: Iterable[Suggestion]) -> List[types.CompletionItem]:
    return [
        types.CompletionItem(
            label=sugg.name,
            kind=sugg.kind,
            detail=sugg.detail or None,
            documentation=sugg.documentation or None,
        )
        for sugg in suggestions
    ]


def _fenced(text: str, language: str) -> str:
    return f"```{language}\n{text}\n```"


def _markdown_hover(contents: str) -> types.Hover:
    return types.Hover(contents=types.MarkupContent(kind=types.MarkupKind.Markdown, value=contents))
