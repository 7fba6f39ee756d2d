"""
Maps free-form CSV headers onto the canonical claim fields.

Matching is a case-insensitive substring test against an ordered synonym list per field.
For each field the first header (in column order) containing any synonym wins. Fields
with no matching header resolve to ``None``; callers supply their own defaults.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

FIELD_PATTERNS: Dict[str, Tuple[str, ...]] = {
    "id": ("patient id", "id", "transaccion", "ref"),
    "amount": ("amount billed", "amount", "monto", "valor", "costo"),
    "diagnosis": ("diagnosis", "diag", "cie", "enfermedad"),
    "procedure": ("treatment", "proc", "procedimiento"),
    "status": ("target_fraude", "target", "status", "label", "fraude", "is_fraud"),
    "provider": ("provider", "prov", "doctor"),
}


def normalize_header(headers: Sequence[str]) -> List[str]:
    return [h.strip().lower() for h in headers]


@dataclass(frozen=True)
class ColumnMapping:
    indices: Mapping[str, Optional[int]] = field(default_factory=dict)

    def index(self, name: str) -> Optional[int]:
        return self.indices.get(name)

    def has(self, name: str) -> bool:
        return self.index(name) is not None

    def value(self, row: Sequence[str], name: str) -> Optional[str]:
        """Cell for ``name`` in ``row``, or None if unmapped, missing or empty."""
        idx = self.index(name)
        if idx is None or idx >= len(row):
            return None
        cell = row[idx]
        return cell if cell else None

    def value_or(self, row: Sequence[str], name: str, default: str) -> str:
        cell = self.value(row, name)
        return default if cell is None else cell


def find_column(headers: Sequence[str], candidates: Sequence[str]) -> Optional[int]:
    for idx, header in enumerate(headers):
        if any(candidate in header for candidate in candidates):
            return idx
    return None


def resolve_columns(
    headers: Sequence[str],
    patterns: Mapping[str, Sequence[str]] = FIELD_PATTERNS,
) -> ColumnMapping:
    normalized = normalize_header(headers)
    return ColumnMapping({name: find_column(normalized, candidates) for name, candidates in patterns.items()})
