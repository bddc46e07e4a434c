from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from lsprotocol import types

from .lexical import identifier_before, in_string
from .parser import find_function
from .registry import BuiltinRegistry

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallContext:
    function_name: Optional[str] = None
    active_parameter: int = 0

    @property
    def found(self) -> bool:
        return self.function_name is not None


NO_CALL = CallContext()


def locate_call(text: str, offset: int) -> CallContext:
    """Find the innermost unclosed call around ``offset`` by scanning backward.

    Commas are only counted at nesting depth zero and outside string
    literals. The scan gives up at a ``;`` outside a string or at the start
    of the document.
    """
    if offset < 0 or not text:
        return NO_CALL
    offset = min(offset, len(text) - 1)

    inside = in_string(text, offset)
    nest_level = 0
    param_num = 0
    while inside or text[offset] != ";":
        char = text[offset]
        if inside:
            if (char == '"' and not (offset > 0 and text[offset - 1] == "\\")) or char == "\n":
                inside = False
        elif char == '"':
            inside = True
        elif char == "(":
            if nest_level == 0:
                name = identifier_before(text, offset - 1)
                if name:
                    return CallContext(function_name=name, active_parameter=param_num)
            else:
                nest_level -= 1
        elif char == ")":
            nest_level += 1
        elif char == "," and nest_level == 0:
            param_num += 1
        offset -= 1
        if offset < 0:
            break
    return NO_CALL


def signature_help_for_offset(
    text: str,
    offset: int,
    builtins: BuiltinRegistry,
    *,
    clamp: bool = True,
) -> Optional[types.SignatureHelp]:
    call = locate_call(text, offset)
    if not call.found:
        return None
    log.debug("Signature help: call to %s, argument %d", call.function_name, call.active_parameter)

    builtin = builtins.lookup(call.function_name)
    if builtin is not None:
        return _signature_help(builtin.signature, builtin.parameters, call.active_parameter, clamp)

    decl = find_function(text, call.function_name)
    if decl is None:
        return None
    sig_info = types.SignatureInformation(
        label=decl.label,
        parameters=[types.ParameterInformation(label=p) for p in decl.parameters],
    )
    return _signature_help(sig_info, decl.parameters, call.active_parameter, clamp)


def _signature_help(
    sig_info: types.SignatureInformation,
    params: Sequence[str],
    active: int,
    clamp: bool,
) -> types.SignatureHelp:
    if clamp:
        active = min(active, max(len(params) - 1, 0))
    return types.SignatureHelp(signatures=[sig_info], active_signature=0, active_parameter=active)
