"""Analyzer module for modtracker."""

from .base import BaseClassifier
from .python import PythonClassifier, classify_file, extract_directives, extract_imports, is_source_file
from .utils import ImportRef, module_name_for_path, resolve_requires, resolve_resources

__all__ = [
    "BaseClassifier",
    "ImportRef",
    "PythonClassifier",
    "classify_file",
    "extract_directives",
    "extract_imports",
    "is_source_file",
    "module_name_for_path",
    "resolve_requires",
    "resolve_resources",
]
