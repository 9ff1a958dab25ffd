# marketplace/services/analytics/attribution_service.py

from enum import IntEnum
from typing import Dict, Iterable, Optional, Set

from marketplace.models.farm_models import FarmOwner
from marketplace.models.order_models import OrderItem


class MatchKind(IntEnum):
    """How an order item was tied to a farm. Higher wins."""
    FARM_NAME = 1
    PRODUCT_ID = 2
    FARM_ID = 3


class AttributionService:
    """
    Maps order line items to the farm that supplied them.

    Items in old carts are tagged inconsistently, so three signals are
    accepted: the item's farmId, membership of the product id in the farm's
    roster, and (last resort) the item's farmName. A FARM_NAME match is a
    data-quality smell and is flagged by callers.
    """

    @staticmethod
    def resolve(item: OrderItem, farm: FarmOwner, farm_product_ids: Set[str]) -> Optional[MatchKind]:
        if item.farmId and item.farmId == farm.id:
            return MatchKind.FARM_ID
        if item.id in farm_product_ids:
            return MatchKind.PRODUCT_ID
        if item.farmName and item.farmName == farm.farm.name:
            return MatchKind.FARM_NAME
        return None

    @staticmethod
    def is_farm_product(item: OrderItem, farm: FarmOwner, farm_product_ids: Set[str]) -> bool:
        return AttributionService.resolve(item, farm, farm_product_ids) is not None

    @staticmethod
    def resolve_owner(
        item: OrderItem,
        farms: Iterable[FarmOwner],
        product_ids_by_farm: Dict[str, Set[str]],
    ) -> Optional[FarmOwner]:
        """
        Best-ranked farm for an item across the whole roster, or None.
        Ties keep the first farm in roster order.
        """
        best = None
        best_kind = None
        for farm in farms:
            kind = AttributionService.resolve(item, farm, product_ids_by_farm.get(farm.id, set()))
            if kind is None:
                continue
            if best_kind is None or kind > best_kind:
                best, best_kind = farm, kind
                if kind == MatchKind.FARM_ID:
                    break
        return best
