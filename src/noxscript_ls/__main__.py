from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable

from .parser import FunctionSignature, find_function_declarations, line_of_offset
from .server import create_server


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="noxscript-ls",
        description="Hover, completion and signature help for NoxScript (.ns) map scripts",
    )
    transport = parser.add_argument_group("transport")
    transport.add_argument("--stdio", action="store_true", help="Talk LSP over stdin/stdout (the default)")
    transport.add_argument("--tcp", action="store_true", help="Listen for one editor connection over TCP")
    transport.add_argument("--host", default="127.0.0.1", help="Address to bind with --tcp")
    transport.add_argument("--port", type=int, default=2087, help="Port to bind with --tcp")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Verbosity of the stderr log: DEBUG, INFO, WARNING or ERROR",
    )
    parser.add_argument(
        "--analyze",
        metavar="FILE",
        help="List the functions declared in a .ns file instead of starting the server",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    if args.analyze:
        if args.tcp:
            parser.error("--analyze does not start a server; drop --tcp")
        sys.exit(_run_analysis(Path(args.analyze)))

    _serve(args.tcp, args.host, args.port)


def _serve(tcp: bool, host: str, port: int) -> None:
    server = create_server()
    if tcp:
        logging.getLogger(__name__).info("Listening on %s:%d", host, port)
        server.start_tcp(host, port)
    else:
        server.start_io()


def _configure_logging(level: str) -> None:
    # stdout is reserved for the LSP stream.
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.WARNING
    logging.basicConfig(level=numeric, stream=sys.stderr, format="[noxscript-ls] %(levelname)s %(name)s: %(message)s")


def _run_analysis(path: Path) -> int:
    if not path.exists():
        print(f"File not found: {path}", file=sys.stderr)
        return 2

    log = logging.getLogger(__name__)
    log.info("Scanning %s for function declarations", path)
    source = path.read_text(encoding="utf-8", errors="replace")
    _print_declarations(path, source, find_function_declarations(source))
    return 0


def _print_declarations(path: Path, source: str, decls: Iterable[FunctionSignature]) -> None:
    decls = list(decls)
    if not decls:
        print(f"{path}: no functions found")
        return

    for decl in decls:
        print(f"{path}:{line_of_offset(source, decl.start) + 1}: {decl.label}")


if __name__ == "__main__":
    main()
