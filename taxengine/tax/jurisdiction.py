"""Decide whether a supply is intra-state or inter-state."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .states import DEFAULT_REGISTRY, StateRegistry

logger = logging.getLogger("taxengine.jurisdiction")

# Buyer-side signals in precedence order. The first one present decides the
# place of supply; the seller's own state is the fallback, which makes a sale
# with no buyer signal intra-state. Place of supply outranks the buyer's
# registered state when both are given and disagree.
RESOLUTION_ORDER = ("place_of_supply", "buyer_state", "seller_state")


@dataclass(frozen=True)
class Jurisdiction:
    """Outcome of resolving the place of supply."""

    seller_state_code: str
    place_of_supply: str
    source: str

    @property
    def is_inter_state(self) -> bool:
        return self.place_of_supply != self.seller_state_code


def _present(value: str | int | None) -> bool:
    return value is not None and str(value).strip() != ""


def resolve_jurisdiction(
    seller_state: str | int,
    buyer_state: str | int | None = None,
    place_of_supply: str | int | None = None,
    *,
    registry: StateRegistry = DEFAULT_REGISTRY,
) -> Jurisdiction:
    """Resolve the place of supply following :data:`RESOLUTION_ORDER`.

    Each argument may be a state code or state name; unknown values raise
    :class:`~taxengine.errors.ValidationError`.
    """

    seller = registry.normalize(seller_state, field="seller state")
    candidates = {
        "place_of_supply": place_of_supply,
        "buyer_state": buyer_state,
        "seller_state": seller,
    }
    resolved = {
        name: registry.normalize(value, field=name.replace("_", " "))
        for name, value in candidates.items()
        if _present(value)
    }

    if "place_of_supply" in resolved and "buyer_state" in resolved:
        if resolved["place_of_supply"] != resolved["buyer_state"]:
            logger.info(
                "place of supply %s overrides buyer state %s",
                resolved["place_of_supply"],
                resolved["buyer_state"],
            )

    source = next(name for name in RESOLUTION_ORDER if name in resolved)
    return Jurisdiction(
        seller_state_code=seller,
        place_of_supply=resolved[source],
        source=source,
    )


def is_inter_state(
    seller_state: str | int,
    buyer_state: str | int | None = None,
    place_of_supply: str | int | None = None,
) -> bool:
    return resolve_jurisdiction(seller_state, buyer_state, place_of_supply).is_inter_state
