"""Regex pattern catalog for the heuristic hook scanner.

The heuristic scanner is the fallback used when the syntax-tree engine has no
opinion (unknown language, tree-sitter not installed) and the complement
merged into engine results otherwise. It is language-agnostic and
deliberately broad: it counts occurrences of risky vocabulary rather than
understanding code, so it over-reports.

Each family contributes its weight once, however many times it occurs.
"""

from __future__ import annotations

import re

from hookwarden.core.models import ScanResult
from hookwarden.core.taxonomy import Capability

# Each entry: (family name, compiled regex, weight, capability implied)

_HEURISTIC_PATTERNS: list[tuple[str, re.Pattern[str], int, Capability]] = [
    (
        "fileSystemDelete",
        re.compile(r"(?:shutil\.rmtree|os\.remove|fs\.unlink|rm\s+-rf|del\s+|Remove-Item)", re.IGNORECASE),
        20,
        Capability.FILE_SYSTEM,
    ),
    (
        "networkRequests",
        re.compile(
            r"(?:requests\.|urllib\.|fetch\(|axios|curl\s+|wget\s+|Invoke-WebRequest|Net\.WebClient)",
            re.IGNORECASE,
        ),
        15,
        Capability.NETWORK,
    ),
    (
        "processExecution",
        re.compile(
            r"(?:subprocess\.|os\.system|exec\(|eval\(|shell_exec|system\(|popen"
            r"|Invoke-Expression|Start-Process)",
            re.IGNORECASE,
        ),
        25,
        Capability.PROCESS_EXECUTION,
    ),
    (
        "dangerousImports",
        re.compile(
            r"import\s+(?:subprocess|shutil|requests|urllib|os|sys)(?:\s|;|$)"
            r"|from\s+(?:subprocess|shutil|requests|urllib|os|sys)\s+import",
            re.IGNORECASE | re.MULTILINE,
        ),
        10,
        Capability.DANGEROUS_IMPORTS,
    ),
    (
        "credentialAccess",
        re.compile(
            r"(?:password|token|secret|api_key|credential|ssh|gpg|aws_access_key|github_token)",
            re.IGNORECASE,
        ),
        30,
        Capability.CREDENTIAL_ACCESS,
    ),
    (
        "envVarAccess",
        re.compile(
            r"(?:os\.environ|process\.env|\$\{?\w+\}?|getenv\(|Environment\.GetEnvironmentVariable)",
            re.IGNORECASE,
        ),
        5,
        Capability.NONE,
    ),
    (
        "fileSystemWrite",
        re.compile(
            r"(?:open\([^,]*,\s*['\"]\w*w|fs\.writeFile|File\.WriteAllText|Out-File|>\s*)",
            re.IGNORECASE,
        ),
        20,
        Capability.FILE_SYSTEM,
    ),
    (
        "databaseAccess",
        re.compile(r"(?:sqlite3|mysql|postgresql|mongodb|redis|connect\(.*database)", re.IGNORECASE),
        10,
        Capability.NONE,
    ),
    (
        "cryptoOperations",
        re.compile(r"(?:hashlib|crypto|bcrypt|scrypt|pbkdf2|AES|RSA|encrypt|decrypt)", re.IGNORECASE),
        5,
        Capability.NONE,
    ),
    (
        "systemModification",
        re.compile(
            r"(?:chmod|chown|mkdir|rmdir|\bmv\b|\bcp\b|move|copy|New-Item|Set-Acl)",
            re.IGNORECASE,
        ),
        20,
        Capability.FILE_SYSTEM,
    ),
]


class HeuristicScanner:
    """Language-agnostic regex scanner. Never returns ``NoOpinion``."""

    def scan(self, content: str) -> ScanResult:
        capabilities = Capability.NONE
        findings: list[str] = []
        score = 0
        for name, pattern, weight, capability in _HEURISTIC_PATTERNS:
            occurrences = len(pattern.findall(content))
            if not occurrences:
                continue
            findings.append(f"{name}: {occurrences} occurrence(s)")
            capabilities |= capability
            score += weight
        return ScanResult.from_capabilities(capabilities, tuple(findings), min(score, 100))
