"""
transfer/queries.py
-------------------
Resolution of named export variants to query text.

Only the variants in :class:`ExportVariant` exist; anything else is a
configuration error raised before a stream is opened or a query runs.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from models.options import ExportVariant
from transfer.errors import ConfigurationError

PROPERTY_SECTIONS = (
    "General, Land, Addresses, BillingAddress, "
    "FireServiceArea, ServiceAreas, Documents, TaxHistory, "
    "AssessmentHistory, Exemptions, TentativeValue, "
    "Structures, Children, Parents;"
)


@dataclass(frozen=True)
class ExportQuery:
    """Query text plus bound parameters. Empty ``sql`` means "no rows"."""
    sql: str
    params: tuple[Any, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not self.sql.strip()


def parse_variant(variant: ExportVariant | str) -> ExportVariant:
    """
    Coerce *variant* to an :class:`ExportVariant` (case-insensitive by name
    or value).

    Raises:
        ConfigurationError: If the name is not a known variant.
    """
    if isinstance(variant, ExportVariant):
        return variant
    wanted = str(variant).strip().lower()
    for candidate in ExportVariant:
        if wanted in (candidate.value.lower(), candidate.name.lower()):
            return candidate
    valid = ", ".join(v.value for v in ExportVariant)
    raise ConfigurationError(f"Unknown export variant '{variant}'. Expected one of: {valid}.")


def _limit_clause(top: int | None) -> str:
    if top is None:
        return ""
    if top < 0:
        raise ConfigurationError(f"Row limit must not be negative (got {top}).")
    return f" LIMIT {int(top)}"


def resolve_query(variant: ExportVariant | str, top: int | None = None) -> ExportQuery:
    """
    Return the query for *variant*.

    Args:
        variant: Variant enum member or its name.
        top:     Optional row limit. For ``Properties`` it limits the
                 number of properties passed to the record procedure.

    Raises:
        ConfigurationError: Unknown variant or negative limit.
    """
    resolved = parse_variant(variant)
    limit = _limit_clause(top)

    if resolved is ExportVariant.CONFIGURATION:
        return ExportQuery(f"SELECT * FROM `PropertySearch`.`Config`{limit}")

    if resolved is ExportVariant.PROPERTIES:
        sql = (
            "CALL `PropertySearch`.`usp_GetPropertyRecord_v2`("
            "(SELECT JSON_ARRAYAGG(pans.`ppd_recordid`) FROM "
            f"(SELECT `ppd_recordid` FROM `prop_phys_def`{limit}) AS pans), "
            "%s)"
        )
        return ExportQuery(sql, (PROPERTY_SECTIONS,))

    # Cama has no query yet; it exports zero rows.
    return ExportQuery("")
