"""
Layout Engine - Table View Pipeline.

Client-side sort, search and filter applied to report tables
(holdings). Rows are plain mappings as delivered by the data
layer, e.g.::

    {
        "symbol": "AAPL",
        "quantity": 10,
        "marketValue": 1950.0,
        "accountType": "Cash",
        "security": {"cusip": "037833100", "description": "Apple Inc"},
        "marketData": {"currentPrice": 195.0},
    }
"""

from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional

from core.exceptions import LayoutValidationError


ALL = "All"

ASSET_CLASSES = ["Annuities", "Equities", "Fixed Income", "Mutual Funds", "Options", "Others"]

ACCOUNT_TYPES = ["Cash", "Margin"]

NUMERIC_SORT_KEYS = {
    "marketValue",
    "unrealizedGL",
    "unrealizedGLPercent",
    "quantity",
    "currentPrice",
    "avgPrice",
}

SORT_DIRECTIONS = ("asc", "desc")


# =============================================================
# ASSET CLASS
# =============================================================

def _nested(row: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = row.get(key)
    return value if isinstance(value, Mapping) else {}


def _security(row: Mapping[str, Any]) -> Mapping[str, Any]:
    return _nested(row, "security")


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def classify_asset_class(row: Mapping[str, Any]) -> str:
    """Asset class from the security description, first match wins."""
    symbol = _text(row.get("symbol")).upper()
    description = _text(_security(row).get("description")).lower()

    if (
        "mutual fund" in description
        or "fund" in description
        or symbol.endswith("MF")
        or "vanguard" in description
        or "fidelity" in description
        or "t rowe" in description
    ):
        return "Mutual Funds"

    if "call" in description or "put" in description or "option" in description:
        return "Options"

    if (
        "bond" in description
        or "treasury" in description
        or "note" in description
        or " cd" in f" {description}"
        or "fixed income" in description
    ):
        return "Fixed Income"

    if "annuity" in description or "pension" in description:
        return "Annuities"

    return "Equities"


# =============================================================
# QUERY
# =============================================================

@dataclass
class TableQuery:
    """Current search, filter and sort selection of a table."""

    search_term: str = ""
    asset_class: str = ALL
    account_type: str = ALL
    sort_key: Optional[str] = None
    sort_direction: str = "asc"

    def __post_init__(self):
        if self.sort_direction not in SORT_DIRECTIONS:
            raise LayoutValidationError(
                f"Invalid sort direction: {self.sort_direction}",
                field="sort_direction",
                value=self.sort_direction,
            )

    def toggle_sort(self, key: str) -> "TableQuery":
        """Same column flips direction, a new column sorts ascending."""
        if self.sort_key == key:
            self.sort_direction = "desc" if self.sort_direction == "asc" else "asc"
        else:
            self.sort_key = key
            self.sort_direction = "asc"
        return self


def sort_value(row: Mapping[str, Any], key: str) -> Any:
    """Value a row is sorted by for the given sort key."""
    if key == "currentPrice":
        value = _nested(row, "marketData").get("currentPrice")
    elif key in ("sector", "description"):
        value = _security(row).get(key)
    elif key == "assetClass":
        value = classify_asset_class(row)
    else:
        value = row.get(key)

    if key in NUMERIC_SORT_KEYS:
        try:
            return float(value or 0)
        except (TypeError, ValueError):
            return 0.0
    return _text(value).lower()


def matches_search(row: Mapping[str, Any], term: str) -> bool:
    if not term:
        return True
    term = term.lower()
    security = _security(row)
    return (
        term in _text(row.get("symbol")).lower()
        or term in _text(security.get("cusip")).lower()
        or term in _text(security.get("description")).lower()
    )


def matches_account_type(row: Mapping[str, Any], account_type: str) -> bool:
    if account_type == ALL:
        return True
    return _text(row.get("accountType")).lower() == account_type.lower()


def matches_asset_class(row: Mapping[str, Any], asset_class: str) -> bool:
    return asset_class == ALL or classify_asset_class(row) == asset_class


def apply_query(rows: Iterable[Mapping[str, Any]], query: TableQuery) -> List[Mapping[str, Any]]:
    """Sort, then filter. The input rows are not modified."""
    processed = list(rows)

    if query.sort_key:
        processed.sort(
            key=lambda row: sort_value(row, query.sort_key),
            reverse=query.sort_direction == "desc",
        )

    return [
        row for row in processed
        if matches_search(row, query.search_term)
        and matches_account_type(row, query.account_type)
        and matches_asset_class(row, query.asset_class)
    ]
