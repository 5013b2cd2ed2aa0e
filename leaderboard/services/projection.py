"""
Schema normalizer — UNION ALL of per-table projections onto logical field names.

A table joins the union only if it carries every required field. Requested
fields a table lacks are projected as NULL instead of excluding the table.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from leaderboard.services.schema import TableDescriptor, quote_identifier, validate_identifier

logger = logging.getLogger('services.projection')


@dataclass
class UnionProjection:
    sql: str
    tables: List[str] = field(default_factory=list)


def build_union_projection(
    descriptors: List[TableDescriptor],
    fields: List[str],
    required: List[str],
    dialect,
    scope: Optional[Dict[str, str]] = None,
) -> Optional[UnionProjection]:
    """
    Build `SELECT ... UNION ALL SELECT ...` over the participating tables.

    scope maps a logical field to a bind parameter name. Tables carrying the
    field get `WHERE <col> = :<param>`; tables without it stay unscoped.

    Returns None when no table qualifies.
    """
    fields = [validate_identifier(f) for f in fields]
    scope = scope or {}

    parts = []
    tables = []
    for desc in descriptors:
        if not desc.has_all(required):
            missing = [f for f in required if not desc.has(f)]
            logger.debug("Skipping %s: missing %s", desc.table, ', '.join(missing))
            continue

        columns = []
        for logical in fields:
            alias = quote_identifier(logical, dialect)
            physical = desc.column(logical)
            if physical is None:
                columns.append(f'NULL AS {alias}')
            else:
                columns.append(f'{quote_identifier(physical, dialect)} AS {alias}')

        part = f'SELECT {", ".join(columns)} FROM {quote_identifier(desc.table, dialect)}'

        conditions = []
        for logical, param in scope.items():
            physical = desc.column(logical)
            if physical is not None:
                conditions.append(f'{quote_identifier(physical, dialect)} = :{validate_identifier(param)}')
        if conditions:
            part += ' WHERE ' + ' AND '.join(conditions)

        logger.debug("Including %s in projection", desc.table)
        parts.append(part)
        tables.append(desc.table)

    if not parts:
        return None
    return UnionProjection(sql=' UNION ALL '.join(parts), tables=tables)
