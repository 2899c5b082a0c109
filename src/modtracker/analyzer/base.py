"""Base classes for declaration classifiers."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Sequence

from ..models.declaration import Declaration


class BaseClassifier(ABC):
    """Abstract base class for source declaration classifiers.

    A classifier decides which files belong to the tracked source family
    and reads the module header of those files.
    """

    @abstractmethod
    def is_source_file(self, file_path: Path) -> bool:
        """Check whether a file belongs to the tracked source family.

        Args:
            file_path: Path to the file.

        Returns:
            True if the file should be read for a module header.
        """
        pass

    @abstractmethod
    def classify_file(self, file_path: Path, dirs: Sequence[Path]) -> Declaration:
        """Read the module header of a source file.

        Args:
            file_path: Path to a file accepted by :meth:`is_source_file`.
            dirs: Resolved source roots, used to resolve requirements.

        Returns:
            A PrimaryDeclaration, SecondaryDeclaration or NotADeclaration.

        Raises:
            DeclarationSyntaxError: If the header is malformed.
        """
        pass
