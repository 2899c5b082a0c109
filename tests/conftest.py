import os
import textwrap
from pathlib import Path

import pytest


class SourceTree:
    """A source directory whose files get strictly increasing mtimes."""

    def __init__(self, root: Path):
        self.root = root
        self.clock = 1_600_000_000 * 10**9

    def path(self, relative: str) -> Path:
        return self.root / relative

    def write(self, relative: str, content: str = "") -> Path:
        path = self.path(relative)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content), encoding="utf-8")
        self.touch(relative)
        return path

    def touch(self, relative: str) -> Path:
        path = self.path(relative)
        self.clock += 10**9
        os.utime(path, ns=(self.clock, self.clock))
        return path

    def set_mtime(self, relative: str, ns: int) -> Path:
        path = self.path(relative)
        os.utime(path, ns=(ns, ns))
        return path


@pytest.fixture
def tree(tmp_path):
    """Empty, resolved source root."""
    root = (tmp_path / "src").resolve()
    root.mkdir()
    return SourceTree(root)


@pytest.fixture
def app_tree(tree):
    """Package ``app`` with ``a`` (no requirements) and ``b`` (requires ``a``)."""
    tree.write("app/__init__.py")
    tree.write("app/a.py", "VALUE = 1\n")
    tree.write("app/b.py", "from app import a\n")
    return tree
