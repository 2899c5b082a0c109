import ast
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from ..exceptions import DeclarationSyntaxError
from ..models.declaration import Declaration, NotADeclaration, PrimaryDeclaration, SecondaryDeclaration
from .base import BaseClassifier
from .utils import (
    SOURCE_SUFFIXES,
    ImportRef,
    is_module_name,
    module_name_for_path,
    resolve_requires,
    resolve_resources,
)

logger = logging.getLogger("modtracker")

RELOAD_INTO = "__reload_into__"
RELOAD_DEPENDS = "__reload_depends__"


@dataclass(frozen=True)
class Directives:
    """Module-level tracker directives found in a source file.

    Attributes:
        into: Module a script fragment runs inside (``__reload_into__``).
        depends: Resource paths the module reads (``__reload_depends__``).
    """

    into: Optional[str] = None
    depends: Tuple[str, ...] = ()


class PythonClassifier(BaseClassifier):
    """Classifier for Python source files.

    A ``.py`` file importable under a module name is a primary declaration;
    its imports and ``__reload_depends__`` entries are its requirements.
    A file that is not importable but sets ``__reload_into__`` is a
    secondary declaration. Anything else is not a declaration.
    """

    def is_source_file(self, file_path: Path) -> bool:
        return is_source_file(file_path)

    def classify_file(self, file_path: Path, dirs: Sequence[Path]) -> Declaration:
        return classify_file(file_path, dirs)


def is_source_file(file_path: Path) -> bool:
    return file_path.suffix in SOURCE_SUFFIXES


def read_source(file_path: Path) -> Optional[ast.Module]:
    """Parse a source file.

    Returns:
        The parsed module, or None if the file no longer exists.

    Raises:
        DeclarationSyntaxError: If the file is not valid UTF-8 Python.
        OSError: If the file exists but cannot be read.
    """
    try:
        with file_path.open("r", encoding="utf-8") as f:
            content = f.read()
    except FileNotFoundError:
        return None
    except UnicodeDecodeError as e:
        raise DeclarationSyntaxError(file_path, f"not valid UTF-8: {e.reason}") from e

    try:
        return ast.parse(content, filename=str(file_path))
    except SyntaxError as e:
        raise DeclarationSyntaxError(file_path, e.msg, e.lineno) from e
    except ValueError as e:
        raise DeclarationSyntaxError(file_path, str(e)) from e


def extract_imports(tree: ast.AST) -> List[ImportRef]:
    """Extract every module reference from an AST.

    Imports nested in functions or conditionals count too: they run when
    the module's code runs. Imports under ``if TYPE_CHECKING:`` never run
    and are skipped, though an ``else`` branch still counts.
    """
    visitor = _ImportVisitor()
    visitor.visit(tree)
    return visitor.refs


def _is_type_checking(test: ast.expr) -> bool:
    if isinstance(test, ast.Name):
        return test.id == "TYPE_CHECKING"
    if isinstance(test, ast.Attribute):
        return test.attr == "TYPE_CHECKING" and isinstance(test.value, ast.Name)
    return False


class _ImportVisitor(ast.NodeVisitor):
    def __init__(self):
        self.refs: List[ImportRef] = []

    def visit_Import(self, node):
        for alias in node.names:
            self.refs.append(ImportRef(alias.name, line=node.lineno))

    def visit_ImportFrom(self, node):
        names = tuple(alias.name for alias in node.names)
        self.refs.append(ImportRef(node.module, names, node.level, node.lineno))

    def visit_If(self, node):
        if not _is_type_checking(node.test):
            self.generic_visit(node)
            return
        for stmt in node.orelse:
            self.visit(stmt)


def extract_directives(tree: ast.Module, file_path: Path) -> Directives:
    """Read ``__reload_into__`` and ``__reload_depends__`` assignments.

    Only top-level assignments of literal values are recognised.

    Raises:
        DeclarationSyntaxError: If a directive is not a literal of the
            expected shape.
    """
    into = None
    depends: Tuple[str, ...] = ()

    for stmt in tree.body:
        if isinstance(stmt, ast.Assign):
            targets = [t.id for t in stmt.targets if isinstance(t, ast.Name)]
            value = stmt.value
        elif isinstance(stmt, ast.AnnAssign) and isinstance(stmt.target, ast.Name) and stmt.value:
            targets = [stmt.target.id]
            value = stmt.value
        else:
            continue

        if RELOAD_INTO in targets:
            into = _literal(value, file_path, RELOAD_INTO)
            if not isinstance(into, str) or not is_module_name(into):
                raise DeclarationSyntaxError(
                    file_path, f"{RELOAD_INTO} must be a dotted module name string", stmt.lineno
                )
        if RELOAD_DEPENDS in targets:
            entries = _literal(value, file_path, RELOAD_DEPENDS)
            if not isinstance(entries, (list, tuple, set, frozenset)) or not all(
                isinstance(entry, str) for entry in entries
            ):
                raise DeclarationSyntaxError(
                    file_path, f"{RELOAD_DEPENDS} must be a list of path strings", stmt.lineno
                )
            depends = tuple(sorted(entries))

    return Directives(into=into, depends=depends)


def _literal(value: ast.expr, file_path: Path, directive: str):
    try:
        return ast.literal_eval(value)
    except (ValueError, TypeError) as e:
        raise DeclarationSyntaxError(
            file_path, f"{directive} must be a literal value", value.lineno
        ) from e


def classify_file(file_path: Path, dirs: Sequence[Path]) -> Declaration:
    """Classify a Python source file by its module header.

    Args:
        file_path: Absolute path of a ``.py`` file.
        dirs: Resolved source roots.

    Returns:
        PrimaryDeclaration for an importable module, SecondaryDeclaration
        for a script fragment that names its host module, otherwise
        NotADeclaration.

    Raises:
        DeclarationSyntaxError: If the file does not parse or a directive
            is malformed.
    """
    tree = read_source(file_path)
    if tree is None:
        logger.debug(f"File disappeared before it could be read: {file_path}")
        return NotADeclaration(file_path)

    directives = extract_directives(tree, file_path)
    name = module_name_for_path(file_path, dirs)

    if name is not None:
        if directives.into is not None:
            logger.debug(f"Ignoring {RELOAD_INTO} in importable module {name}")
        requires = resolve_requires(extract_imports(tree), file_path, name, dirs)
        resources = resolve_resources(directives.depends, file_path, dirs)
        return PrimaryDeclaration(name, frozenset(requires | resources), file_path)

    if directives.into is not None:
        return SecondaryDeclaration(directives.into, file_path)

    return NotADeclaration(file_path)
