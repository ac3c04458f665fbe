"""
Binding generation tools.

These tools parse C/C++ headers with tree-sitter and translate the
shapes the grammar knows into a ctypes Python module.

Core capabilities:
- Module generation for one header or a set of headers
- Capture inspection for debugging grammar rules
- Grammar listing
- Header download into the local cache

Configuration is done via environment variables (see treebind.config):
- TREEBIND_INCLUDE_DIRS: Directories searched for headers given by name
- TREEBIND_DYNLIB: Shared library loaded by generated modules
"""

from typing import Annotated, Literal

from ..binder import get_generator
from ..fetch import HeaderFetchError, get_fetcher
from ..grammar import collect_captures

# Type alias for mode parameter
ModeType = Literal["c", "cpp"]


# ============================================================================
# Generation Tools
# ============================================================================


async def generate_bindings(
    header_path: Annotated[str, "Header path, or a header name found in the include dirs"],
    dynlib: str = "",
    mode: ModeType | None = None,
) -> dict:
    """
    Generate a ctypes module for a C/C++ header.

    Args:
        header_path: Header file path or name.
        dynlib: Shared library the module loads (default: TREEBIND_DYNLIB,
            else the symbols of the running process).
        mode: Language mode `c` | `cpp` (default: from the file extension).

    Returns:
        A dict with:
        - ok: bool
        - header: str
        - counts: dict (declarations per category)
        - module: str (Python source)
        - error: str (only when ok is False)
    """
    generator = get_generator()
    try:
        context = generator.generate_file(header_path, mode=mode)
    except FileNotFoundError as e:
        return {"ok": False, "header": header_path, "error": str(e)}

    return {
        "ok": True,
        "header": header_path,
        "counts": context.counts(),
        "module": generator.render(context, dynlib or None),
    }


async def generate_bindings_for_headers(
    header_paths: Annotated[list[str], "Headers bound together; shared declarations are emitted once"],
    dynlib: str = "",
) -> dict:
    """
    Generate one ctypes module for several headers.

    The headers share one symbol registry, so a declaration repeated
    across headers is emitted only once (from the first header).

    Returns:
        A dict with:
        - ok: bool
        - headers: list[str]
        - counts: dict
        - declarations: dict (per category, JSON-able)
        - module: str
    """
    generator = get_generator()
    try:
        context = generator.generate_headers(header_paths)
    except FileNotFoundError as e:
        return {"ok": False, "headers": header_paths, "error": str(e)}

    result = {"ok": True, **context.to_dict()}
    result["module"] = generator.render(context, dynlib or None)
    return result


# ============================================================================
# Grammar Tools
# ============================================================================


async def inspect_captures(
    source: Annotated[str, "C/C++ source text to match against the grammar"],
    mode: ModeType = "c",
) -> dict:
    """
    Show which nodes the grammar claims and what each match captures.

    Returns:
        A dict:
        - has_errors: bool (tree-sitter reported parse errors)
        - matches: list[dict] with kind, line, pattern, captures
    """
    generator = get_generator()
    table = generator.table
    tree = generator.parse(source, mode)

    matches = []
    for node in generator.walk(tree.root_node):
        claimed = table.match(node)
        if claimed is None:
            continue
        pattern, found = claimed
        matches.append({
            "kind": node.type,
            "line": node.start_point[0] + 1,
            "pattern": pattern.to_text(),
            "captures": [[c.kind, c.text] for c in collect_captures(found)],
        })

    return {"has_errors": tree.root_node.has_error, "matches": matches}


async def describe_grammar() -> dict:
    """
    List the registered grammar.

    Returns:
        A dict:
        - kinds: list[str] (node kinds with at least one pattern)
        - pattern_count: int
        - grammar: str (every pattern in the pattern language)
    """
    table = get_generator().table
    return {
        "kinds": table.kinds(),
        "pattern_count": len(table),
        "grammar": table.describe(),
    }


# ============================================================================
# Header Acquisition
# ============================================================================


async def fetch_header(
    url: Annotated[str, "URL of a header to download into the cache"],
    force: bool = False,
) -> dict:
    """
    Download a header into the cache directory.

    An already cached file is returned without downloading unless
    `force` is set.

    Returns:
        A dict:
        - ok: bool
        - url: str
        - path: str (local file, when ok)
        - error: str (when not ok)
    """
    try:
        path = await get_fetcher().fetch(url, force=force)
    except HeaderFetchError as e:
        return {"ok": False, "url": url, "error": str(e)}
    return {"ok": True, "url": url, "path": str(path)}
