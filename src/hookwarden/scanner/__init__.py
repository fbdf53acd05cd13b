"""Hook scanner service built on the syntax-tree analysis engine.

Submodules
----------
- ``heuristics``: Regex fallback scanner (language-agnostic).
- ``models``: RiskLevel tiers and the HookFile record.
- ``service``: The HookScanner facade: engine + fallback + merge, settings
  walking, and the safety report.

All public names are re-exported here::

    from hookwarden.scanner import HookScanner, HeuristicScanner, HookFile, RiskLevel
"""

from hookwarden.scanner.heuristics import HeuristicScanner
from hookwarden.scanner.models import HookFile, RiskLevel
from hookwarden.scanner.service import HookScanner, merge_results

__all__ = [
    "HeuristicScanner",
    "HookFile",
    "HookScanner",
    "RiskLevel",
    "merge_results",
]
