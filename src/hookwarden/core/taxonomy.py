"""Risk taxonomy: the closed set of finding categories.

Security queries name the construct they detect with a capture from a
three-tier vocabulary::

    danger.<category>   constructs that are harmful on their own
    warn.<category>     constructs that are risky depending on input
    taint.<category>    access to sensitive data

The capture name is the only signal that crosses from the query files to the
scorer, and it is a stable external contract: downstream tooling may build
policy on the prefixes.

``RiskCategory`` maps each taxonomy prefix to its severity weight and to the
capabilities it implies. Members are declared in severity-table order and
``RiskCategory.classify()`` returns the first member whose prefix matches,
so ``danger.fsdelete`` resolves to ``DANGER_FS_DELETE`` before the broader
``danger.fs`` entry is considered.
"""

from __future__ import annotations

from enum import Enum, Flag, auto

TAXONOMY_TIERS: tuple[str, ...] = ("danger.", "warn.", "taint.")

DEFAULT_WEIGHT = 5


class Capability(Flag):
    """Capabilities a hook exercises, derived from its finding categories."""

    NONE = 0
    FILE_SYSTEM = auto()
    NETWORK = auto()
    PROCESS_EXECUTION = auto()
    DANGEROUS_IMPORTS = auto()
    CREDENTIAL_ACCESS = auto()


def capabilities_for_name(name: str) -> Capability:
    """Derive capabilities from a raw taxonomy name by substring.

    Applied to every capture name on top of its category's declared flags.
    """
    caps = Capability.NONE
    if "fs" in name:
        caps |= Capability.FILE_SYSTEM
    if "net" in name:
        caps |= Capability.NETWORK
    if "exec" in name or "eval" in name:
        caps |= Capability.PROCESS_EXECUTION
    if "danger.import" in name:
        caps |= Capability.DANGEROUS_IMPORTS
    if "taint.env" in name:
        caps |= Capability.CREDENTIAL_ACCESS
    return caps


def is_taxonomy_name(name: str) -> bool:
    """Return True if a capture name belongs to the risk taxonomy."""
    return name.startswith(TAXONOMY_TIERS)


_FS = Capability.FILE_SYSTEM
_NET = Capability.NETWORK
_EXEC = Capability.PROCESS_EXECUTION


class RiskCategory(Enum):
    """Finding categories with their taxonomy prefix, weight, and capabilities."""

    DANGER_EXEC = ("danger.exec", 30, _EXEC)
    DANGER_NET_EXEC = ("danger.netexec", 30, _NET | _EXEC)
    DANGER_EVAL = ("danger.eval", 30, _EXEC)
    DANGER_FS_DELETE = ("danger.fsdelete", 25, _FS)
    DANGER_FS_WRITE = ("danger.fswrite", 25, _FS)
    DANGER_FS = ("danger.fs", 20, _FS)
    DANGER_NET = ("danger.net", 20, _NET)
    WARN_FS_WRITE = ("warn.fswrite", 10, _FS)
    WARN_FS = ("warn.fs", 10, _FS)
    WARN_NET = ("warn.net", 10, _NET)
    WARN_ENV = ("warn.env", 10, Capability.NONE)
    DANGER_UNQUOTED_EXPANSION = ("danger.unquoted_expansion", 15, Capability.NONE)
    DANGER_SUBST = ("danger.subst", 15, Capability.NONE)
    TAINT_ENV = ("taint.env", 5, Capability.CREDENTIAL_ACCESS)
    DANGER_IMPORT = ("danger.import", DEFAULT_WEIGHT, Capability.DANGEROUS_IMPORTS)
    UNCLASSIFIED = ("", DEFAULT_WEIGHT, Capability.NONE)

    def __init__(self, prefix: str, weight: int, capabilities: Capability) -> None:
        self.prefix = prefix
        self.weight = weight
        self.capabilities = capabilities

    @classmethod
    def classify(cls, name: str) -> RiskCategory:
        """Return the first category whose prefix the capture name starts with."""
        for category in _ORDERED:
            if name.startswith(category.prefix):
                return category
        return cls.UNCLASSIFIED

    def capabilities_of(self, name: str) -> Capability:
        """Capabilities implied by a capture of this category named ``name``.

        The category's declared flags plus whatever the substring rule finds in
        the rest of the name, so ``danger.netexec_fs`` also carries file system
        access.
        """
        return self.capabilities | capabilities_for_name(name)


_ORDERED: tuple[RiskCategory, ...] = tuple(
    c for c in RiskCategory if c is not RiskCategory.UNCLASSIFIED
)


def severity_for(name: str) -> int:
    """Weight contributed by one capture named ``name``."""
    return RiskCategory.classify(name).weight
