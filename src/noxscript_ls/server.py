from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from lsprotocol import types
from pygls.lsp.server import LanguageServer

from . import __version__
from .completions import completion_items, hover_for_offset, resolve_completion_item
from .config import NoxScriptLSConfig, load_config
from .registry import BuiltinRegistry, extend_builtins, load_builtins
from .signature_help import signature_help_for_offset

log = logging.getLogger(__name__)

SIGNATURE_TRIGGER_CHARACTERS = ["(", ","]


class NoxScriptLanguageServer(LanguageServer):
    def __init__(self, builtins: BuiltinRegistry | None = None):
        super().__init__(
            "noxscript-ls",
            __version__,
            text_document_sync_kind=types.TextDocumentSyncKind.Full,
        )
        self._base_builtins = builtins if builtins is not None else load_builtins()
        self._builtins = self._base_builtins
        self._config = NoxScriptLSConfig.default(Path.cwd())

    @property
    def builtins(self) -> BuiltinRegistry:
        return self._builtins

    @property
    def config(self) -> NoxScriptLSConfig:
        return self._config

    def load_workspace(self, workspace_root: Path) -> None:
        config, warnings = load_config(workspace_root)
        for warning in warnings:
            log.warning(warning)
        self._config = config
        self._builtins = extend_builtins(self._base_builtins, config.builtin_files)
        log.info("Loaded workspace %s (%d builtins)", workspace_root, len(self._builtins))

    def text_and_offset(self, uri: str, position: types.Position) -> tuple[str, int]:
        """Document text and the offset of the character just before ``position``."""
        document = self.workspace.get_text_document(uri)
        return document.source, document.offset_at_position(position) - 1


def on_initialized(ls: NoxScriptLanguageServer, params: types.InitializedParams) -> None:
    root = ls.workspace.root_path
    ls.load_workspace(Path(root) if root else Path.cwd())


def on_hover(ls: NoxScriptLanguageServer, params: types.HoverParams) -> Optional[types.Hover]:
    text, offset = ls.text_and_offset(params.text_document.uri, params.position)
    return hover_for_offset(text, offset, ls.builtins, ls.config.hover.language)


def on_completion(ls: NoxScriptLanguageServer, params: types.CompletionParams) -> List[types.CompletionItem]:
    document = ls.workspace.get_text_document(params.text_document.uri)
    return completion_items(document.source, ls.builtins, ls.config.keywords)


def on_completion_resolve(ls: NoxScriptLanguageServer, item: types.CompletionItem) -> types.CompletionItem:
    return resolve_completion_item(item)


def on_signature_help(ls: NoxScriptLanguageServer, params: types.SignatureHelpParams) -> Optional[types.SignatureHelp]:
    text, offset = ls.text_and_offset(params.text_document.uri, params.position)
    return signature_help_for_offset(
        text,
        offset,
        ls.builtins,
        clamp=ls.config.signature_help.clamp_active_parameter,
    )


def create_server(builtins: BuiltinRegistry | None = None) -> NoxScriptLanguageServer:
    server = NoxScriptLanguageServer(builtins)
    server.feature(types.INITIALIZED)(on_initialized)
    server.feature(types.TEXT_DOCUMENT_HOVER)(on_hover)
    server.feature(types.TEXT_DOCUMENT_COMPLETION, types.CompletionOptions(resolve_provider=True))(on_completion)
    server.feature(types.COMPLETION_ITEM_RESOLVE)(on_completion_resolve)
    server.feature(
        types.TEXT_DOCUMENT_SIGNATURE_HELP,
        types.SignatureHelpOptions(trigger_characters=SIGNATURE_TRIGGER_CHARACTERS),
    )(on_signature_help)
    return server
