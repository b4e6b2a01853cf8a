import os
import re

from db.session import engine
from models.families import TableFamily
from services.errors import InvalidIdentifier

_TOKEN_RE = re.compile(r"[A-Za-z0-9_]+")


def identifier_max_length(dialect=None) -> int:
    """Longest table name the store keeps without truncating it.

    IDENTIFIER_MAX_LENGTH overrides the limit reported by the dialect.
    """
    override = os.getenv("IDENTIFIER_MAX_LENGTH")
    if override:
        return int(override)
    return (dialect or engine.dialect).max_identifier_length


def validate_token(token) -> str:
    if isinstance(token, bool) or not isinstance(token, (str, int)):
        raise InvalidIdentifier(f"Unsupported table key: {token!r}")
    value = str(token)
    if not value:
        raise InvalidIdentifier("Table key must not be empty")
    if not _TOKEN_RE.fullmatch(value):
        raise InvalidIdentifier(f"Table key contains unsafe characters: {value!r}")
    return value


def resolve(family: TableFamily, *key_parts, dialect=None) -> str:
    """
    Compose the physical table name for a family instance.

    Every key token must be alphanumeric/underscore; the composed name
    must fit the store's identifier length limit.
    """
    if len(key_parts) != family.arity:
        raise InvalidIdentifier(
            f"Family '{family.name}' expects {family.arity} key(s), got {len(key_parts)}"
        )

    parts = [validate_token(part) for part in key_parts]
    if family.prefix:
        parts.insert(0, family.prefix)
    if family.suffix:
        parts.append(family.suffix)

    table_name = "_".join(parts)
    limit = identifier_max_length(dialect)
    if len(table_name) > limit:
        raise InvalidIdentifier(f"Table name {table_name!r} exceeds {limit} characters")
    return table_name
