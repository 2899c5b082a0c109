"""Reload changed modules in dependency order."""

import importlib
import sys
from dataclasses import dataclass, field
from types import ModuleType
from typing import Callable, Dict, List, MutableMapping, Optional

from .logging import get_logger
from .tracker import ModuleTracker

logger = get_logger(__name__)


@dataclass
class ReloadReport:
    """Outcome of one reload pass.

    Attributes:
        reloaded: Modules reloaded, in order.
        skipped: Affected modules that were never imported.
        failed: Error message per module whose reload raised.
    """

    reloaded: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def changed(self) -> bool:
        return bool(self.reloaded or self.skipped or self.failed)


class Reloader:
    """Reloads the modules a tracker reports, dependencies first.

    Only modules already present in ``modules`` are reloaded; the others
    will pick up the new code when they are first imported.
    """

    def __init__(
        self,
        tracker: ModuleTracker,
        modules: Optional[MutableMapping[str, ModuleType]] = None,
        reload: Callable[[ModuleType], ModuleType] = importlib.reload,
    ):
        self.tracker = tracker
        self.modules = sys.modules if modules is None else modules
        self._reload = reload

    def reload_changed(self) -> ReloadReport:
        """Check the tracker and reload whatever it reports.

        A module that fails to reload is recorded and the remaining modules
        are still attempted. Tracker errors propagate.
        """
        report = ReloadReport()
        names = self.tracker.check()
        if names is None:
            return report

        for name in names:
            module = self.modules.get(name)
            if module is None:
                report.skipped.append(name)
                continue
            try:
                self.modules[name] = self._reload(module)
            except Exception as e:
                logger.error("reload.failed", module=name, error=str(e))
                report.failed[name] = f"{type(e).__name__}: {e}"
                continue
            report.reloaded.append(name)

        logger.info(
            "reload.complete",
            reloaded=len(report.reloaded),
            skipped=len(report.skipped),
            failed=sorted(report.failed),
        )
        return report
