"""Learning domain exceptions."""

from smartalk.domain.common.exceptions import EntityNotFoundError


class ItemNotFoundError(EntityNotFoundError):
    """Raised when an item is not part of the unit group it was answered in."""

    def __init__(self, item_id: int, unit_group_id: int) -> None:
        super().__init__("Item", item_id)
        self.details["unit_group_id"] = unit_group_id
        self.message = f"Item with id {item_id} not found in unit group {unit_group_id}"
