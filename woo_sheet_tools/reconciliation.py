"""Replace filename references in cell values with media library URLs."""

from dataclasses import dataclass
from enum import Enum
from typing import List, Mapping, Optional, Tuple

from .media_library import normalize_filename

URL_PREFIXES = ("http://", "https://")

HIGHLIGHT_COLORS = {
    "partial": "FFFFCC",  # yellow
    "unresolved": "FFCCCC",  # red
}


class Classification(str, Enum):
    SKIPPED = "skipped"
    RESOLVED = "resolved"
    PARTIAL = "partial"
    UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class ReconciliationResult:
    value: object
    classification: Classification
    found: int = 0
    not_found: int = 0

    @property
    def highlight(self) -> Optional[str]:
        return HIGHLIGHT_COLORS.get(self.classification.value)


@dataclass
class ReconciliationSummary:
    resolved: int = 0
    partial: int = 0
    unresolved: int = 0
    skipped: int = 0

    def add(self, result: ReconciliationResult):
        name = result.classification.value
        setattr(self, name, getattr(self, name) + 1)

    @property
    def total(self) -> int:
        return self.resolved + self.partial + self.unresolved + self.skipped


def is_url(token: str) -> bool:
    return token.startswith(URL_PREFIXES)


def reconcile_cell(value, index: Mapping[str, str]) -> ReconciliationResult:
    """Resolve each comma-separated filename in ``value`` against ``index``.

    Empty cells and cells holding only URLs come back untouched as skipped.
    Otherwise every token is looked up by its normalized key; tokens already
    carrying an http(s) prefix count as found, unknown names are kept as-is.
    """
    if value is None or str(value).strip() == "":
        return ReconciliationResult(value, Classification.SKIPPED)

    tokens = [t.strip() for t in str(value).strip().split(",")]
    if all(is_url(t) for t in tokens):
        return ReconciliationResult(value, Classification.SKIPPED)

    resolved = []
    found = 0
    not_found = 0
    for token in tokens:
        if is_url(token):
            resolved.append(token)
            found += 1
            continue

        match = index.get(normalize_filename(token))
        if match:
            resolved.append(match)
            found += 1
        else:
            resolved.append(token)
            not_found += 1

    if found and not_found:
        classification = Classification.PARTIAL
    elif found:
        classification = Classification.RESOLVED
    else:
        classification = Classification.UNRESOLVED

    return ReconciliationResult(", ".join(resolved), classification, found, not_found)


def reconcile_column(
    values, index: Mapping[str, str]
) -> Tuple[List[ReconciliationResult], ReconciliationSummary]:
    results = []
    summary = ReconciliationSummary()
    for value in values:
        result = reconcile_cell(value, index)
        summary.add(result)
        results.append(result)
    return results, summary
