"""
Schema adapter — logical snapshot fields → physical columns, plus existence probes.

Snapshot tables come in two naming conventions:
  - real names (XBLTotal): the logical field name *is* the column name
  - positional names (XBLTotal1..3): field1..field13 in a fixed order

Which tables exist, and which columns they carry, is discovered per query.
Identifiers can't be bound as parameters, so everything that ends up
interpolated into SQL goes through quote_identifier().
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set

from sqlalchemy import inspect

from leaderboard.config import GENERIC_FIELD_TABLES, SNAPSHOT_TABLES
from leaderboard.errors import InvalidIdentifierError

logger = logging.getLogger('services.schema')

_IDENTIFIER_RE = re.compile(r'^[A-Za-z0-9_]+$')

# Logical record shape shared by every snapshot table, in positional order
SNAPSHOT_FIELDS = [
    'id',
    'leaderboard_id',
    'rank',
    'name',
    'first_place_finishes',
    'second_place_finishes',
    'third_place_finishes',
    'races_completed',
    'kudos_rank',
    'kudos',
    'folder_date',
    'data_date',
    'sync_id',
]

GENERIC_FIELD_MAP = {name: f'field{i}' for i, name in enumerate(SNAPSHOT_FIELDS, start=1)}


# ── Naming strategies ────────────────────────────────────────────────────────

class IdentityNaming:
    """Tables whose columns are named after the logical fields."""

    def column(self, logical_field: str) -> str:
        return logical_field


class GenericFieldNaming:
    """Tables with positional columns. Unknown fields pass through unchanged."""

    def __init__(self, mapping: Dict[str, str] = None):
        self.mapping = mapping or GENERIC_FIELD_MAP

    def column(self, logical_field: str) -> str:
        return self.mapping.get(logical_field, logical_field)


_IDENTITY = IdentityNaming()
_GENERIC = GenericFieldNaming()


def naming_for(table: str):
    """Pick the naming strategy for a physical table."""
    return _GENERIC if table in GENERIC_FIELD_TABLES else _IDENTITY


def resolve_column(table: str, logical_field: str) -> str:
    """
    Physical column for a logical field in a table.

    Fail-open: a field outside the known set comes back as-is, so the result
    may not exist. Check column_exists() before using it.
    """
    return naming_for(table).column(logical_field)


# ── Identifier chokepoint ────────────────────────────────────────────────────

def is_valid_identifier(name) -> bool:
    return isinstance(name, str) and bool(_IDENTIFIER_RE.match(name))


def validate_identifier(name: str) -> str:
    """Return name unchanged if it is alphanumeric/underscore, else raise."""
    if not is_valid_identifier(name):
        raise InvalidIdentifierError(name)
    return name


def quote_identifier(name: str, dialect) -> str:
    """Validate and quote a table/column name for interpolation into SQL."""
    return dialect.identifier_preparer.quote_identifier(validate_identifier(name))


# ── Existence probes ─────────────────────────────────────────────────────────

def table_exists(session, table: str, inspector=None) -> bool:
    """True if the table exists. Invalid names are rejected, never queried."""
    if not is_valid_identifier(table):
        logger.warning("Rejected table name %r", table)
        return False
    inspector = inspector or inspect(session.connection())
    return inspector.has_table(table)


def column_exists(session, table: str, logical_field: str, inspector=None) -> bool:
    """True if the table has the physical column backing a logical field."""
    if not is_valid_identifier(table) or not is_valid_identifier(logical_field):
        logger.warning("Rejected identifier %r.%r", table, logical_field)
        return False
    inspector = inspector or inspect(session.connection())
    if not inspector.has_table(table):
        return False
    column = resolve_column(table, logical_field)
    return any(col['name'] == column for col in inspector.get_columns(table))


# ── Table descriptors ────────────────────────────────────────────────────────

@dataclass
class TableDescriptor:
    """Capability set of one physical table for the duration of a query."""
    table: str
    naming: object
    fields: Set[str] = field(default_factory=set)

    def has(self, logical_field: str) -> bool:
        return logical_field in self.fields

    def has_all(self, logical_fields: Iterable[str]) -> bool:
        return all(f in self.fields for f in logical_fields)

    def column(self, logical_field: str) -> Optional[str]:
        """Physical column for a field this table carries, else None."""
        if logical_field not in self.fields:
            return None
        return self.naming.column(logical_field)


def describe_tables(session, logical_fields: Iterable[str], tables: List[str] = None) -> List[TableDescriptor]:
    """
    Probe each configured table for the requested logical fields.

    Missing tables are left out; present tables list only the fields they
    actually carry. One inspector per call, so nothing is cached across queries.
    """
    logical_fields = [validate_identifier(f) for f in logical_fields]
    inspector = inspect(session.connection())

    descriptors = []
    for table in (tables if tables is not None else SNAPSHOT_TABLES):
        if not table_exists(session, table, inspector=inspector):
            logger.debug("Skipping %s: table does not exist", table)
            continue
        naming = naming_for(table)
        physical = {col['name'] for col in inspector.get_columns(table)}
        present = {f for f in logical_fields if naming.column(f) in physical}
        descriptors.append(TableDescriptor(table=table, naming=naming, fields=present))
    return descriptors
