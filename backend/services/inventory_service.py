import logging
from typing import Callable, Dict, List, Optional, Tuple
from models.errors import AuthorizationError
from models.inventory_models import Part, PartQuery, Product, User, now_iso, temporary_part_id
from services.filter_service import filter_parts, filter_products, get_inventory_statistics
from services.sync_service import SyncCoordinator
from services.validation_service import clean_part_fields, ensure_unique_part_no

logger = logging.getLogger(__name__)


def require_admin(user: Optional[User]):
    """Only admins may add, edit, delete or adjust parts"""
    if user is None:
        raise AuthorizationError("Login required")
    if not user.is_admin:
        logger.warning(f"AUTH: {user.email} ({user.role}) attempted a mutating action")
        raise AuthorizationError("Only admins can modify inventory")


class InventoryService:
    """
    Inventory actions on top of the sync coordinator

    Each mutating action checks the caller's role and validates the entered
    fields, then hands the coordinator a function that builds the product's
    new part list (checking part number uniqueness) for a reconciliation round.
    """

    def __init__(self, coordinator: SyncCoordinator):
        self.coordinator = coordinator
        self.state = coordinator.state
        logger.info("Inventory service initialized")

    # ================================================================
    # Read side
    # ================================================================
    def get_products(self) -> List[Product]:
        return self.state.products()

    def get_product(self, product_id: int) -> Product:
        product = self.state.get_product(product_id)
        if product is None:
            raise KeyError(f"Unknown product id: {product_id}")
        return product

    def search(self, scope: str, query: PartQuery) -> List[Tuple[Product, List[Part]]]:
        """Products in scope, each with its parts matching the query"""
        products = filter_products(self.state.products(), scope)
        return [(product, filter_parts(product.parts, query)) for product in products]

    def get_statistics(self) -> Dict:
        return get_inventory_statistics(self.state.products())

    def get_sync_history(self, limit: int = 20) -> List[Dict]:
        return self.coordinator.get_sync_history(limit)

    def refresh(self) -> List[Product]:
        return self.coordinator.refresh()

    # ================================================================
    # Mutations
    #
    # The new part list is built by a function the coordinator calls under
    # the product's round lock, against the parts left by the previous round.
    # ================================================================
    def _find_part(self, parts: List[Part], part_id: str) -> Part:
        part = next((p for p in parts if p.id == part_id), None)
        if part is None:
            raise KeyError(f"Unknown part id: {part_id}")
        return part

    def add_part(self, user: Optional[User], product_id: int, name: str, part_no: str,
                 vendor: str, quantity=0) -> List[Product]:
        require_admin(user)
        product = self.get_product(product_id)
        name, part_no, vendor, quantity = clean_part_fields(name, part_no, vendor, quantity)

        def with_new_part(parts: List[Part]) -> List[Part]:
            ensure_unique_part_no(parts, part_no)
            new_part = Part(
                id=temporary_part_id(),
                name=name,
                part_no=part_no,
                quantity=quantity,
                vendor=vendor,
                is_new=True,
                created_at=now_iso(),
            )
            return parts + [new_part]

        logger.info(f"ADD: {part_no} to {product.name}")
        return self.coordinator.reconcile(product_id, with_new_part)

    def edit_part(self, user: Optional[User], product_id: int, part_id: str, name: str,
                  part_no: str, vendor: str, quantity=0) -> List[Product]:
        require_admin(user)
        product = self.get_product(product_id)
        name, part_no, vendor, quantity = clean_part_fields(name, part_no, vendor, quantity)

        def with_edited_part(parts: List[Part]) -> List[Part]:
            self._find_part(parts, part_id)
            ensure_unique_part_no(parts, part_no, exclude_id=part_id)
            return [
                p.copy(name=name, part_no=part_no, vendor=vendor, quantity=quantity,
                       updated_at=now_iso(), is_new=False) if p.id == part_id else p
                for p in parts
            ]

        logger.info(f"EDIT: {part_no} in {product.name}")
        return self.coordinator.reconcile(product_id, with_edited_part)

    def delete_part(self, user: Optional[User], product_id: int, part_id: str) -> List[Product]:
        require_admin(user)
        product = self.get_product(product_id)

        def without_part(parts: List[Part]) -> List[Part]:
            part = self._find_part(parts, part_id)
            logger.info(f"DELETE: {part.part_no} from {product.name}")
            return [p for p in parts if p.id != part_id]

        return self.coordinator.reconcile(product_id, without_part)

    def set_quantity(self, user: Optional[User], product_id: int, part_id: str,
                     quantity: int) -> List[Product]:
        """Quick quantity update; a negative quantity is a no-op"""
        return self._update_quantity(user, product_id, part_id, lambda current: quantity)

    def adjust_quantity(self, user: Optional[User], product_id: int, part_id: str,
                        delta: int) -> List[Product]:
        """Increment or decrement a part's quantity by delta"""
        return self._update_quantity(user, product_id, part_id, lambda current: current + delta)

    def _update_quantity(self, user: Optional[User], product_id: int, part_id: str,
                         new_quantity: Callable[[int], int]) -> List[Product]:
        require_admin(user)
        self.get_product(product_id)

        def with_quantity(parts: List[Part]) -> Optional[List[Part]]:
            quantity = new_quantity(self._find_part(parts, part_id).quantity)
            if quantity < 0:
                logger.debug(f"QUANTITY: Ignoring negative quantity for {part_id}")
                return None
            return [
                p.copy(quantity=quantity, updated_at=now_iso()) if p.id == part_id else p
                for p in parts
            ]

        return self.coordinator.reconcile(product_id, with_quantity)
