"""
MCP Server entry point - treebind.

Runs as an MCP server by default, or generates a module directly with
`--generate`.

Environment variables:
- TREEBIND_MODE: Default language mode (c/cpp)
- TREEBIND_INCLUDE_DIRS: Header search directories
- TREEBIND_DYNLIB: Shared library loaded by generated modules
- TREEBIND_CACHE_DIR: Header download cache
- TREEBIND_FETCH_TIMEOUT: Download timeout in seconds
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from fastmcp import FastMCP

from . import __version__
from .config import get_config, reset_config
from .tools import bindings

# Initialize MCP server
mcp = FastMCP(
    name="treebind",
    version=__version__,
)


def register_tools():
    """Register MCP tools."""
    mcp.tool(description="Generate a ctypes module for a C/C++ header")(
        bindings.generate_bindings
    )
    mcp.tool(description="Generate one ctypes module for several headers")(
        bindings.generate_bindings_for_headers
    )

    mcp.tool(description="Show grammar matches and captures for C/C++ source")(
        bindings.inspect_captures
    )
    mcp.tool(description="List the registered grammar patterns")(bindings.describe_grammar)

    mcp.tool(description="Download a header into the local cache")(bindings.fetch_header)

    print("[treebind] Registered 5 tools.", file=sys.stderr)


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="treebind",
        description="Grammar-driven ctypes binding generator (MCP server)",
    )

    parser.add_argument(
        "--generate",
        nargs="+",
        metavar="HEADER",
        help="Generate a module for the given headers and exit",
        default=None,
    )
    parser.add_argument(
        "--output",
        "-o",
        help="Write the generated module here (default: stdout)",
        default=None,
    )
    parser.add_argument(
        "--dynlib",
        help="Shared library loaded by the generated module",
        default=None,
    )
    parser.add_argument(
        "--mode",
        choices=["c", "cpp"],
        help="Default language mode",
        default=None,
    )
    parser.add_argument(
        "--include-dir",
        "-I",
        action="append",
        dest="include_dirs",
        help="Header search directory (repeatable)",
        default=None,
    )
    parser.add_argument(
        "--print-grammar",
        action="store_true",
        help="Print the registered grammar and exit",
    )
    parser.add_argument(
        "--print-config",
        action="store_true",
        help="Print effective config and exit",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )

    # Transport options
    parser.add_argument(
        "--transport",
        choices=["stdio", "http", "sse"],
        default="stdio",
        help="MCP transport (default: stdio)",
    )
    parser.add_argument(
        "--mcp-host",
        default="127.0.0.1",
        help="Host for http/sse transport (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--mcp-port",
        type=int,
        default=8000,
        help="Port for http/sse transport (default: 8000)",
    )
    parser.add_argument(
        "--mcp-path",
        default="/mcp",
        help="Path prefix for http transport (default: /mcp)",
    )

    return parser


def _apply_cli_overrides(args: argparse.Namespace) -> None:
    """Apply CLI overrides to env vars (single-run convenience)."""
    if args.mode:
        os.environ["TREEBIND_MODE"] = args.mode
    if args.dynlib:
        os.environ["TREEBIND_DYNLIB"] = args.dynlib
    if args.include_dirs:
        os.environ["TREEBIND_INCLUDE_DIRS"] = os.pathsep.join(args.include_dirs)
    reset_config()


def _generate(headers: list[str], output: str | None) -> int:
    """Generate one module for the given headers."""
    from .binder import get_generator

    generator = get_generator()
    try:
        context = generator.generate_headers(headers)
    except FileNotFoundError as e:
        print(f"[treebind] {e}", file=sys.stderr)
        return 1

    module = generator.render(context)
    if output:
        Path(output).write_text(module, encoding="utf-8")
        counts = ", ".join(f"{k}={v}" for k, v in context.counts().items())
        print(f"[treebind] Wrote {output} ({counts})", file=sys.stderr)
    else:
        sys.stdout.write(module)
    return 0


def main():
    """Run the MCP server, or generate a module and exit."""
    parser = _build_arg_parser()
    args = parser.parse_args(sys.argv[1:])
    _apply_cli_overrides(args)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.print_config:
        cfg = get_config()
        print("[treebind] Effective config:")
        print(f"  MODE: {cfg.mode.value}")
        print(f"  INCLUDE_DIRS: {cfg.include_dirs}")
        print(f"  DYNLIB: {cfg.dynlib}")
        print(f"  CACHE_DIR: {cfg.cache_dir}")
        print(f"  FETCH_TIMEOUT: {cfg.fetch_timeout}")
        return

    if args.print_grammar:
        from .binder import get_grammar_table

        print(get_grammar_table().describe())
        return

    if args.generate:
        sys.exit(_generate(args.generate, args.output))

    register_tools()

    if args.transport == "stdio":
        mcp.run()
    elif args.transport == "http":
        mcp.run(transport="http", host=args.mcp_host, port=args.mcp_port, path=args.mcp_path)
    else:
        mcp.run(transport="sse", host=args.mcp_host, port=args.mcp_port)


if __name__ == "__main__":
    main()
