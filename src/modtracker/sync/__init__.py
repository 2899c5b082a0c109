# Sync module for change detection and incremental graph updates

from .change_detection import ChangeSet, modified, newer_declarations, newer_sources
from .incremental import update_dependency_graph

__all__ = [
    'ChangeSet', 'modified', 'newer_declarations', 'newer_sources',
    'update_dependency_graph',
]
