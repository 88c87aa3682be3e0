"""In-process compilation of a fixture source tree."""

from __future__ import annotations

import ast
import importlib
import importlib.util
import io
import logging
import py_compile
import sys
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Set, Tuple

from .errors import CompilationFailed
from .utils import COMPILED_SUFFIX, SOURCE_SUFFIX, list_files, to_module_name

logger = logging.getLogger(__name__)

_IMPORT_ERRORS = frozenset({"ImportError", "ModuleNotFoundError", "Exception", "BaseException"})

_MODULE_ATTRIBUTES = frozenset(
    {"__name__", "__doc__", "__file__", "__spec__", "__loader__", "__package__", "__path__"}
)

_BLOCK_FIELDS = ("body", "orelse", "finalbody")

ModuleTable = Dict[str, Optional[FrozenSet[str]]]
"""Dotted module name to the top-level names it defines. ``None`` when they cannot be known."""


@dataclass(frozen=True)
class CompileResult:
    """The output of a successful compile."""

    compiled: List[Path]
    """The compiled files, one per source file."""
    diagnostics: str
    """Warnings reported by the compiler. Empty for a clean compile."""


def compile_sources(source_dir: Path) -> CompileResult:
    """Compile every source file of a directory as a single unit.

    Each ``.py`` file is byte-compiled into a ``.pyc`` file next to it. The pyc files use
    unchecked hash-based invalidation, so they do not depend on file timestamps and can be
    imported after the sources are dropped.

    Imports are then resolved: first against the modules of the tree itself, so that the sources
    may reference one another, and then against the host environment, since fixtures implement
    base types that live outside of the tree. Both the imported module and the names taken from
    it with ``from ... import`` must exist. In-tree names are checked against the top-level
    definitions of the module; host modules named in a ``from`` import are imported to check
    their attributes. Imports guarded by ``except ImportError`` are optional and not checked.

    Parameters
    ----------
    source_dir : Path
        Directory containing the python sources.

    Returns
    -------
    CompileResult
        The compiled files and any warnings.

    Raises
    ------
    CompilationFailed
        If the directory has no sources, a source does not compile, an import cannot be
        resolved, or the compiled output cannot be written. The exception carries the complete
        diagnostic output.
    """
    sources = list_files(source_dir, lambda p: p.suffix == SOURCE_SUFFIX)
    if not sources:
        raise CompilationFailed(f"No {SOURCE_SUFFIX} sources found in {source_dir}")

    trees: Dict[Path, Optional[ast.Module]] = {}
    for source in sources:
        try:
            trees[source] = _parse(source)
        except OSError as e:
            raise CompilationFailed(f"Could not read {source}: {e}", diagnostics=str(e)) from e

    modules = _collect_modules(source_dir, trees)
    out = io.StringIO()
    errors = 0
    compiled: List[Path] = []

    for source in sources:
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            try:
                cfile = py_compile.compile(
                    str(source),
                    cfile=str(source.with_suffix(COMPILED_SUFFIX)),
                    doraise=True,
                    invalidation_mode=py_compile.PycInvalidationMode.UNCHECKED_HASH,
                )
            except py_compile.PyCompileError as e:
                errors += 1
                out.write(e.msg.rstrip("\n") + "\n")
                continue
            except OSError as e:
                out.write(f"{source}: error: cannot write compiled output: {e}\n")
                raise CompilationFailed(
                    f"Could not write compiled output for {source}: {e}",
                    diagnostics=out.getvalue(),
                ) from e
        for w in caught:
            out.write(f"{source}:{w.lineno}: warning: {w.message}\n")
        compiled.append(Path(cfile))

        tree = trees[source]
        if tree is None:
            continue
        module = to_module_name(source_dir, source)
        is_package = source.stem == "__init__"
        for lineno, message in _unresolved_imports(tree, module, is_package, modules):
            errors += 1
            out.write(f"{source}:{lineno}: error: {message}\n")

    diagnostics = out.getvalue()
    if errors:
        raise CompilationFailed(
            f"Failed to compile test plugin in {source_dir} ({errors} error(s)):\n{diagnostics}",
            diagnostics=diagnostics,
        )
    if diagnostics:
        logger.warning("Compiler warnings for %s:\n%s", source_dir, diagnostics)
    return CompileResult(compiled=compiled, diagnostics=diagnostics)


def _parse(source: Path) -> Optional[ast.Module]:
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        try:
            return ast.parse(source.read_bytes(), filename=str(source))
        except (SyntaxError, ValueError):
            # py_compile reports it
            return None


def _collect_modules(source_dir: Path, trees: Dict[Path, Optional[ast.Module]]) -> ModuleTable:
    """Map every module and package of the tree to the names it defines.

    Directories without ``__init__.py`` are namespace packages and define no names of their own.
    """
    modules: ModuleTable = {}
    for source, tree in trees.items():
        name = to_module_name(source_dir, source)
        if not name:
            continue
        parts = name.split(".")
        for i in range(1, len(parts)):
            modules.setdefault(".".join(parts[:i]), frozenset())
        modules[name] = _defined_names(tree) if tree is not None else None
    return modules


def _defined_names(tree: ast.Module) -> Optional[FrozenSet[str]]:
    """Collect the names bound at the top level of a module.

    Returns ``None`` for modules whose namespace is open, i.e. that use ``import *`` or define a
    module ``__getattr__``.
    """
    names: Set[str] = set(_MODULE_ATTRIBUTES)
    for stmt in _top_level_statements(tree.body):
        if isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
            if stmt.name == "__getattr__":
                return None
            names.add(stmt.name)
        elif isinstance(stmt, (ast.Import, ast.ImportFrom)):
            for alias in stmt.names:
                if alias.name == "*":
                    return None
                names.add(alias.asname or alias.name.partition(".")[0])
        else:
            for target in _assignment_targets(stmt):
                names.update(n.id for n in ast.walk(target) if isinstance(n, ast.Name))
    return frozenset(names)


def _top_level_statements(body: Iterable[ast.stmt]) -> Iterator[ast.stmt]:
    for stmt in body:
        yield stmt
        if isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
            continue
        for field in _BLOCK_FIELDS:
            yield from _top_level_statements(getattr(stmt, field, []))
        for handler in getattr(stmt, "handlers", []):
            yield from _top_level_statements(handler.body)


def _assignment_targets(stmt: ast.stmt) -> List[ast.AST]:
    if isinstance(stmt, ast.Assign):
        return list(stmt.targets)
    if isinstance(stmt, (ast.AnnAssign, ast.AugAssign, ast.For, ast.AsyncFor)):
        return [stmt.target]
    if isinstance(stmt, (ast.With, ast.AsyncWith)):
        return [item.optional_vars for item in stmt.items if item.optional_vars is not None]
    return []


def _unresolved_imports(
    tree: ast.AST, module: str, is_package: bool, modules: ModuleTable
) -> Iterator[Tuple[int, str]]:
    """Yield ``(lineno, message)`` for each import that resolves neither in-tree nor on the host."""
    package = module if is_package else module.rpartition(".")[0]
    for node, guarded in _walk_imports(tree, False):
        if guarded:
            continue
        if isinstance(node, ast.Import):
            for alias in node.names:
                message = _check_module(alias.name, modules)
                if message:
                    yield node.lineno, message
            continue

        if node.level == 0:
            target = node.module
            message = _check_module(target, modules)
        else:
            parts = package.split(".") if package else []
            if node.level - 1 >= len(parts):
                yield node.lineno, "attempted relative import beyond top-level package"
                continue
            base = ".".join(parts[: len(parts) - (node.level - 1)])
            target = f"{base}.{node.module}" if node.module else base
            message = None if target in modules else f"cannot resolve relative import '{target}'"
        if message:
            yield node.lineno, message
            continue

        names = [alias.name for alias in node.names if alias.name != "*"]
        for message in _missing_names(target, names, modules):
            yield node.lineno, message


def _check_module(name: str, modules: ModuleTable) -> Optional[str]:
    """Get the error message for an absolute module import, or ``None`` if it resolves."""
    if name.partition(".")[0] in modules:
        return None if name in modules else f"cannot resolve import '{name}'"
    if name in sys.modules:
        return None
    try:
        spec = importlib.util.find_spec(name)
    except ModuleNotFoundError:
        spec = None
    except Exception as e:
        return f"cannot resolve import '{name}': {type(e).__name__}: {e}"
    return None if spec is not None else f"cannot resolve import '{name}'"


def _missing_names(module: str, names: List[str], modules: ModuleTable) -> List[str]:
    """Get the error messages for names that ``module`` does not provide."""
    if module.partition(".")[0] in modules:
        defined = modules[module]
        return [
            f"cannot import name '{name}' from '{module}'"
            for name in names
            if f"{module}.{name}" not in modules and defined is not None and name not in defined
        ]

    if not names:
        return []
    try:
        host = importlib.import_module(module)
    except Exception as e:
        return [f"importing '{module}' failed: {type(e).__name__}: {e}"]
    return [
        f"cannot import name '{name}' from '{module}'"
        for name in names
        if not hasattr(host, name) and _check_module(f"{module}.{name}", modules) is not None
    ]


def _walk_imports(node: ast.AST, guarded: bool) -> Iterator[Tuple[ast.AST, bool]]:
    if isinstance(node, (ast.Import, ast.ImportFrom)):
        yield node, guarded
        return
    if isinstance(node, ast.Try):
        body_guarded = guarded or any(_catches_import_error(h) for h in node.handlers)
        for child in node.body:
            yield from _walk_imports(child, body_guarded)
        for child in node.handlers + node.orelse + node.finalbody:
            yield from _walk_imports(child, guarded)
        return
    for child in ast.iter_child_nodes(node):
        yield from _walk_imports(child, guarded)


def _catches_import_error(handler: ast.ExceptHandler) -> bool:
    if handler.type is None:
        return True
    names = handler.type.elts if isinstance(handler.type, ast.Tuple) else [handler.type]
    return any(isinstance(n, ast.Name) and n.id in _IMPORT_ERRORS for n in names)
