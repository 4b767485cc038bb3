"""Build import dependency graph for internal modules.

Parses .py files under the given package root collecting edges between
project-internal modules (prefix ``svcbus.``). Used in tests to enforce:
  - No cycles between svcbus modules.
  - No forbidden edges (architecture constraints).

AST based: relative imports are resolved against the importing module and
imports guarded by ``if TYPE_CHECKING:`` are ignored (annotation-only).
"""
from __future__ import annotations

import ast
from pathlib import Path
from typing import Dict, Iterator, List, Set, Tuple

PACKAGE = "svcbus"


def _module_name(root_path: Path, py: Path) -> str:
    rel = py.relative_to(root_path).with_suffix("").as_posix().replace("/", ".")
    if rel == "__init__":
        return PACKAGE
    if rel.endswith(".__init__"):
        rel = rel[: -len(".__init__")]
    return f"{PACKAGE}.{rel}"


def _is_type_checking_guard(node: ast.If) -> bool:
    test = node.test
    if isinstance(test, ast.Name):
        return test.id == "TYPE_CHECKING"
    if isinstance(test, ast.Attribute):
        return test.attr == "TYPE_CHECKING"
    return False


def _runtime_nodes(tree: ast.AST) -> Iterator[ast.AST]:
    stack = [tree]
    while stack:
        node = stack.pop()
        if isinstance(node, ast.If) and _is_type_checking_guard(node):
            stack.extend(node.orelse)
            continue
        yield node
        stack.extend(ast.iter_child_nodes(node))


def _resolve_from(mod: str, is_pkg: bool, node: ast.ImportFrom) -> str | None:
    if node.level == 0:
        return node.module
    parts = mod.split(".")
    base = parts if is_pkg else parts[:-1]
    if node.level > 1:
        base = base[: -(node.level - 1)]
    if node.module:
        return ".".join(base + [node.module])
    return ".".join(base)


def build_import_graph(root: str | Path = PACKAGE) -> Dict[str, Set[str]]:
    root_path = Path(root)
    edges: Dict[str, Set[str]] = {}
    files = [p for p in root_path.rglob("*.py") if "__pycache__" not in p.parts]
    known = {_module_name(root_path, p) for p in files}
    for py in files:
        mod = _module_name(root_path, py)
        is_pkg = py.name == "__init__.py"
        try:
            tree = ast.parse(py.read_text(encoding="utf-8"))
        except SyntaxError:
            continue
        for node in _runtime_nodes(tree):
            targets: List[str] = []
            if isinstance(node, ast.Import):
                targets = [n.name for n in node.names]
            elif isinstance(node, ast.ImportFrom):
                base = _resolve_from(mod, is_pkg, node)
                if base:
                    # `from pkg import submodule` depends on the submodule
                    targets = [
                        f"{base}.{a.name}"
                        if f"{base}.{a.name}" in known
                        else base
                        for a in node.names
                    ]
            for tgt in targets:
                if tgt == PACKAGE or tgt.startswith(PACKAGE + "."):
                    if tgt != mod:
                        edges.setdefault(mod, set()).add(tgt)
    for n in list(edges.keys()):
        for m in edges[n]:
            edges.setdefault(m, set())
    return edges


def detect_cycles(graph: Dict[str, Set[str]]) -> List[List[str]]:
    visited: Set[str] = set()
    stack: Set[str] = set()
    cycles: List[List[str]] = []

    def dfs(node: str, path: List[str]):
        if node in stack:
            if node in path:
                idx = path.index(node)
                cycles.append(path[idx:] + [node])
            return
        if node in visited:
            return
        visited.add(node)
        stack.add(node)
        for nxt in graph.get(node, []):
            dfs(nxt, path + [nxt])
        stack.remove(node)

    for n in graph:
        if n not in visited:
            dfs(n, [n])
    return cycles


def forbidden_edges(
    graph: Dict[str, Set[str]], rules: List[Tuple[str, str]]
) -> List[Tuple[str, str]]:
    found: List[Tuple[str, str]] = []
    for src, targets in graph.items():
        for dst in targets:
            for a, b in rules:
                if src.startswith(a) and dst.startswith(b):
                    found.append((src, dst))
    return found


__all__ = [
    "build_import_graph",
    "detect_cycles",
    "forbidden_edges",
]
