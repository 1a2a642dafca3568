# src/plumbline/sizing/tiers.py
"""Warehouse size tiers and their credit multipliers."""

from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Sequence, Tuple

import structlog

from ..core.exceptions import ErrorCodes, InvalidInputError, TierNotFoundError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SizeTier:
    """One warehouse size: credits consumed per hour relative to X-Small."""
    name: str
    cost_multiplier: int
    ordinal_index: int


# (name, credits per hour) from smallest to largest.
_CATALOG: Tuple[Tuple[str, int], ...] = (
    ("X-Small", 1),
    ("Small", 2),
    ("Medium", 4),
    ("Large", 8),
    ("X-Large", 16),
    ("2X-Large", 32),
    ("3X-Large", 64),
    ("4X-Large", 128),
)


class SizeTierTable:
    """Ordered catalog of warehouse sizes.

    Lookups are exact; ``resolve`` is the lenient entry point used at the
    collaborator boundary, where sizes arrive as free text.

    Example:
        >>> large = DEFAULT_TIERS.lookup("Large")
        >>> DEFAULT_TIERS.tier_below(large).name
        'Medium'
    """

    def __init__(self, tiers: Sequence[SizeTier]) -> None:
        if not tiers:
            raise InvalidInputError("A tier table needs at least one tier")

        ordered = tuple(sorted(tiers, key=lambda t: t.ordinal_index))
        for index, tier in enumerate(ordered):
            if tier.ordinal_index != index:
                raise InvalidInputError(
                    f"Tier ordinals must be contiguous from 0, got {tier.ordinal_index} for {tier.name}",
                    context={"tier": tier.name},
                )
            if index and tier.cost_multiplier <= ordered[index - 1].cost_multiplier:
                raise InvalidInputError(
                    f"Tier multipliers must increase with size: {tier.name}",
                    context={"tier": tier.name},
                )

        self._tiers = ordered
        self._by_key: Dict[str, SizeTier] = {self._key(t.name): t for t in ordered}

    @classmethod
    def default(cls) -> "SizeTierTable":
        return cls([
            SizeTier(name=name, cost_multiplier=multiplier, ordinal_index=index)
            for index, (name, multiplier) in enumerate(_CATALOG)
        ])

    @staticmethod
    def _key(name: str) -> str:
        return name.strip().lower()

    def lookup(self, name: str) -> SizeTier:
        """Return the tier named exactly ``name``.

        Raises:
            TierNotFoundError: If no tier has that name
        """
        for tier in self._tiers:
            if tier.name == name:
                return tier
        raise TierNotFoundError(
            f"Unknown warehouse size: {name}",
            code=ErrorCodes.TIER_NOT_FOUND,
            context={"name": name, "known": [t.name for t in self._tiers]},
        )

    def resolve(self, name: Optional[str]) -> SizeTier:
        """Resolve a free-text size, falling back to the smallest tier.

        Matching ignores case and surrounding whitespace. Unknown sizes
        resolve to X-Small, which is how the warehouse listing treats
        sizes it cannot parse.

        Raises:
            InvalidInputError: If ``name`` is missing or blank
        """
        if name is None or not str(name).strip():
            raise InvalidInputError(
                "Warehouse size is required",
                code=ErrorCodes.MISSING_TIER_NAME,
            )

        tier = self._by_key.get(self._key(str(name)))
        if tier is None:
            logger.warning("Unknown warehouse size, assuming smallest", size=name, fallback=self.smallest.name)
            return self.smallest
        return tier

    def _position(self, tier: SizeTier) -> int:
        index = tier.ordinal_index
        if not 0 <= index < len(self._tiers) or self._tiers[index] != tier:
            raise TierNotFoundError(
                f"Warehouse size is not in this tier table: {tier.name}",
                code=ErrorCodes.TIER_NOT_FOUND,
                context={"name": tier.name, "known": [t.name for t in self._tiers]},
            )
        return index

    def tier_below(self, tier: SizeTier) -> Optional[SizeTier]:
        """Next smaller tier, or None for the smallest.

        Raises:
            TierNotFoundError: If ``tier`` belongs to another table
        """
        index = self._position(tier)
        return self._tiers[index - 1] if index > 0 else None

    def tier_above(self, tier: SizeTier) -> Optional[SizeTier]:
        index = self._position(tier)
        return self._tiers[index + 1] if index + 1 < len(self._tiers) else None

    @property
    def smallest(self) -> SizeTier:
        return self._tiers[0]

    @property
    def largest(self) -> SizeTier:
        return self._tiers[-1]

    def __iter__(self) -> Iterator[SizeTier]:
        return iter(self._tiers)

    def __len__(self) -> int:
        return len(self._tiers)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self._key(name) in self._by_key

    def __repr__(self) -> str:
        return f"SizeTierTable({', '.join(t.name for t in self._tiers)})"


DEFAULT_TIERS = SizeTierTable.default()
