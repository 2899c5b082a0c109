"""Outcomes of reading a source file's module header."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Hashable, Union


@dataclass(frozen=True)
class PrimaryDeclaration:
    """A file that declares a module and the things it requires.

    Attributes:
        name: Dotted module name declared by the file.
        requires: Tracked module names and resource paths the module needs.
        path: Source file the declaration was read from.
    """

    name: str
    requires: FrozenSet[Hashable] = field(default_factory=frozenset)
    path: Path | None = None


@dataclass(frozen=True)
class SecondaryDeclaration:
    """A script fragment that runs inside an already declared module."""

    name: str
    path: Path | None = None


@dataclass(frozen=True)
class NotADeclaration:
    path: Path | None = None


Declaration = Union[PrimaryDeclaration, SecondaryDeclaration, NotADeclaration]
