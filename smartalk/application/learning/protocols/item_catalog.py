from typing import Protocol

from smartalk.domain.common.value_objects import ItemId, UnitGroupId


class ItemCatalogProtocol(Protocol):
    """Content catalog: which items make up a unit group."""

    def required_item_ids(self, unit_group_id: UnitGroupId) -> frozenset[ItemId]:
        """
        Items a user must unlock to complete the unit group.

        Optional (bonus) items of the group are not included.
        """
        ...

    def contains_item(self, unit_group_id: UnitGroupId, item_id: ItemId) -> bool: ...
