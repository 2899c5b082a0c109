import keyword
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Hashable, Iterable, Optional, Sequence, Set, Tuple

logger = logging.getLogger(__name__)

SOURCE_SUFFIXES = (".py", ".pyw")


@dataclass(frozen=True)
class ImportRef:
    """One module reference found in a source file.

    ``import a.b`` gives ``ImportRef("a.b")``; ``from ..x import y, z``
    gives ``ImportRef("x", ("y", "z"), level=2)``.
    """

    module: Optional[str]
    names: Tuple[str, ...] = ()
    level: int = 0
    line: Optional[int] = None


def is_module_name(name: str) -> bool:
    """Check that ``name`` is a dotted sequence of identifiers."""
    if not name:
        return False
    return all(part.isidentifier() and not keyword.iskeyword(part) for part in name.split("."))


def module_name_for_path(file_path: Path, dirs: Sequence[Path]) -> Optional[str]:
    """Work out the dotted module name a source file is importable as.

    The innermost root containing the file wins, so nested source roots
    behave like separate ``sys.path`` entries.

    Args:
        file_path: Absolute path to a source file.
        dirs: Resolved source roots.

    Returns:
        The module name, or None if the path does not form one.
    """
    if file_path.suffix not in SOURCE_SUFFIXES:
        return None

    for root in sorted(dirs, key=lambda d: len(d.parts), reverse=True):
        if not file_path.is_relative_to(root):
            continue
        parts = list(file_path.relative_to(root).with_suffix("").parts)
        if parts and parts[-1] == "__init__":
            parts.pop()
        name = ".".join(parts)
        return name if is_module_name(name) else None
    return None


def module_exists(name: str, dirs: Sequence[Path]) -> bool:
    """True if a source file for ``name`` exists under one of ``dirs``."""
    relative = Path(*name.split("."))
    for root in dirs:
        for suffix in SOURCE_SUFFIXES:
            if (root / relative).with_suffix(suffix).is_file():
                return True
        if (root / relative / "__init__.py").is_file():
            return True
    return False


def is_tracked_top_level(name: str, dirs: Sequence[Path]) -> bool:
    """True if the top-level package or module of ``name`` lives under ``dirs``."""
    top = name.split(".")[0]
    for root in dirs:
        if (root / top).is_dir():
            return True
        if any((root / top).with_suffix(suffix).is_file() for suffix in SOURCE_SUFFIXES):
            return True
    return False


def _resolve_relative(level: int, module: Optional[str], current: str, is_package: bool) -> Optional[str]:
    """Resolve a relative import to an absolute module name."""
    package = current.split(".") if is_package else current.split(".")[:-1]
    if level - 1 >= len(package):
        return None
    base = package[: len(package) - (level - 1)]
    if module:
        base = base + module.split(".")
    return ".".join(base) or None


def resolve_requires(
    refs: Iterable[ImportRef], file_path: Path, module_name: str, dirs: Sequence[Path]
) -> Set[str]:
    """Map raw import references to tracked module names.

    A reference is kept when its top-level package lives under one of the
    source roots, even if the module itself has no file yet; everything
    else (standard library, installed packages) is dropped. Only the
    ``import pkg.mod`` form waits on a missing module: ``from pkg import
    mod`` cannot tell a missing module from a name and requires ``pkg``.

    Args:
        refs: References extracted from the file.
        file_path: The file the references come from.
        module_name: Module name of that file, for relative imports.
        dirs: Resolved source roots.

    Returns:
        Required module names, without the module itself.
    """
    is_package = file_path.name == "__init__.py"
    requires: Set[str] = set()

    for ref in refs:
        if ref.level:
            base = _resolve_relative(ref.level, ref.module, module_name, is_package)
            if base is None:
                logger.debug(f"Could not resolve relative import in {file_path}, line {ref.line}")
                continue
        else:
            base = ref.module

        if not base or not is_tracked_top_level(base, dirs):
            continue

        if not ref.names:
            requires.add(base)
            continue

        for name in ref.names:
            candidate = f"{base}.{name}"
            if name != "*" and module_exists(candidate, dirs):
                requires.add(candidate)
            else:
                requires.add(base)

    requires.discard(module_name)
    return requires


def resolve_resources(entries: Iterable[str], file_path: Path, dirs: Sequence[Path]) -> Set[Hashable]:
    """Resolve resource paths listed by a module to absolute file paths.

    Entries are relative to the module's directory. Paths outside the
    source roots are dropped.
    """
    resources: Set[Hashable] = set()
    for entry in entries:
        resolved = (file_path.parent / entry).resolve()
        if any(resolved.is_relative_to(root) for root in dirs):
            resources.add(resolved)
        else:
            logger.debug(f"Ignoring resource outside source roots: {entry} in {file_path}")
    return resources

