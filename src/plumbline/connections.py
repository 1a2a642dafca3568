"""Warehouse connection selection.

Every dashboard request runs against one warehouse connection. When the
caller does not name one, the connection flagged active is used, falling
back to the first configured connection.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Sequence

from .core.exceptions import ErrorCodes, InvalidInputError
from .core.utils import DictUtils

_TRUE_FLAGS = frozenset({"true", "t", "yes", "y", "1"})
_FALSE_FLAGS = frozenset({"false", "f", "no", "n", "0", ""})


def _parse_flag(value: Any, field: str) -> bool:
    """Interpret a stored boolean; text flags are matched case-insensitively."""
    if value is None:
        return False
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_FLAGS:
            return True
        if text in _FALSE_FLAGS:
            return False
        raise InvalidInputError(
            f"Invalid {field} flag: {value!r}",
            code=ErrorCodes.INVALID_RECORD,
            context={"field": field, "value": value},
        )
    return bool(value)


@dataclass(frozen=True)
class ConnectionProfile:
    """A configured warehouse connection (credentials live elsewhere)."""
    id: int
    name: str
    is_active: bool = False

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ConnectionProfile":
        """Build a profile from a stored connection row.

        Raises:
            InvalidInputError: If ``id`` is missing or not an integer, or
                the active flag is unreadable
        """
        data = DictUtils.normalize_keys(dict(row))
        raw_id = data.get("id")
        try:
            connection_id = int(raw_id)
        except (TypeError, ValueError) as e:
            raise InvalidInputError(
                f"Connection row has no usable id: {raw_id!r}",
                code=ErrorCodes.INVALID_RECORD,
                context={"present": sorted(data)},
                cause=e,
            ) from e

        return cls(
            id=connection_id,
            name=str(data.get("name") or ""),
            is_active=_parse_flag(data.get("is_active"), "is_active"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "is_active": self.is_active}


def resolve_connection(connections: Sequence[ConnectionProfile]) -> ConnectionProfile:
    """Pick the connection a request should run against.

    Raises:
        InvalidInputError: If there are no connections
    """
    if not connections:
        raise InvalidInputError(
            "No warehouse connections are configured",
            code=ErrorCodes.NO_CONNECTIONS,
        )

    for connection in connections:
        if connection.is_active:
            return connection
    return connections[0]
