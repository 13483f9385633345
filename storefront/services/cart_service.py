from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.domain.cart import CartLine, CartView
from storefront.domain.errors import (
    ConcurrentModification,
    InvalidAmount,
    ItemNotFound,
    ProductUnavailable,
)
from storefront.repos.cart_repo import CartRepo
from storefront.services.product_client import ProductClient, check_stock
from storefront.services.lock_service import cart_lock_key
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Prosta implementacja cqrs dla domeny cart
    commands (add, update_quantity, remove) modyfikuja stan pod lockiem uzytkownika
    query (snapshot) tylko odczyt, ceny pobierane na nowo z katalogu
    """

    def __init__(
        self,
        db: Session,
        product_client: ProductClient,
        lock_service,
    ):
        self.repo = CartRepo(db)
        self.product_client = product_client
        self.lock_service = lock_service

    #query - odczyt
    def snapshot(self, user_id: int) -> Dict[str, Any]:
        return self.view(user_id).to_dict()

    def view(self, user_id: int) -> CartView:
        cart = self.repo.get_cart_by_user(user_id)
        if not cart:
            return CartView(user_id=user_id)

        items = self.repo.get_cart_items(cart.id)
        lines, unavailable = self.price_lines(items)
        return CartView(user_id=user_id, lines=lines, unavailable=unavailable, updated_at=cart.updated_at)

    def price_lines(self, items: list[CartItemModel]) -> tuple[list[CartLine], list[int]]:
        """Re-price stored lines from the catalog; lines the catalog cannot fill come back separately."""
        lines: list[CartLine] = []
        unavailable: list[int] = []

        for item in items:
            try:
                info = self.product_client.lookup(item.product_id)
            except ProductUnavailable:
                unavailable.append(item.product_id)
                continue

            # wycofany albo w magazynie mniej niz w koszyku
            if not info.covers(item.quantity):
                unavailable.append(item.product_id)
                continue

            lines.append(CartLine(product_id=item.product_id, quantity=item.quantity, unit_price=info.price))

        return lines, unavailable

    #commands
    def add_item(self, user_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        if quantity < 1:
            raise InvalidAmount("Quantity must be at least 1", quantity=quantity)

        # HTTP do product-service (walidacja + cena), poza lockiem
        logger.info(f"Fetching product {product_id} for user {user_id} cart")
        info = self.product_client.require_available(product_id, quantity)

        with self.lock_service.hold(cart_lock_key(user_id)):
            try:
                cart = self._get_or_create_cart(user_id)
                existing_item = self.repo.get_cart_item(cart.id, product_id)

                if existing_item:
                    check_stock(info, existing_item.quantity + quantity)
                    logger.info(
                        f"Product {product_id} already in cart, quantity "
                        f"{existing_item.quantity} -> {existing_item.quantity + quantity}"
                    )
                    existing_item.quantity += quantity
                    existing_item.unit_price = info.price.minor
                else:
                    logger.info(f"Adding product {product_id} to cart {cart.id}")
                    self.repo.add_cart_item(
                        CartItemModel(
                            cart_id=cart.id,
                            product_id=product_id,
                            quantity=quantity,
                            unit_price=info.price.minor,
                        )
                    )

                self._bump_version(cart)
                self.repo.commit()
            except Exception as e:
                logger.error(f"Error adding product {product_id} to cart of user {user_id}: {e}")
                self.repo.rollback()
                raise

        return self.snapshot(user_id)

    def update_quantity(self, user_id: int, product_id: int, new_quantity: int) -> Dict[str, Any]:
        info = self.product_client.require_available(product_id, new_quantity) if new_quantity >= 1 else None

        with self.lock_service.hold(cart_lock_key(user_id)):
            try:
                cart = self.repo.get_cart_by_user(user_id)
                item = self.repo.get_cart_item(cart.id, product_id) if cart else None
                if item is None:
                    raise ItemNotFound(f"Product {product_id} is not in the cart", product_id=product_id)

                if new_quantity < 1:
                    # ilosc <= 0 to usuniecie pozycji, nigdy nie zapisujemy ilosci <= 0
                    logger.info(f"Quantity {new_quantity} for product {product_id}, removing line")
                    self.repo.delete_cart_item(cart.id, product_id)
                else:
                    logger.info(f"Setting quantity of product {product_id} in cart {cart.id} to {new_quantity}")
                    item.quantity = new_quantity
                    item.unit_price = info.price.minor

                self._bump_version(cart)
                self.repo.commit()
            except Exception:
                self.repo.rollback()
                raise

        return self.snapshot(user_id)

    def remove_item(self, user_id: int, product_id: int) -> Dict[str, Any]:
        with self.lock_service.hold(cart_lock_key(user_id)):
            try:
                cart = self.repo.get_cart_by_user(user_id)
                #brak koszyka albo pozycji to nie blad
                if cart and self.repo.delete_cart_item(cart.id, product_id):
                    logger.info(f"Removed product {product_id} from cart {cart.id}")
                    self._bump_version(cart)
                self.repo.commit()
            except Exception:
                self.repo.rollback()
                raise

        return self.snapshot(user_id)

    #uzywane przez checkout, ktory sam trzyma lock i sam robi commit
    def lock(self, user_id: int):
        return self.lock_service.hold(cart_lock_key(user_id))

    def load_for_checkout(self, user_id: int) -> tuple[CartModel | None, list[CartItemModel]]:
        cart = self.repo.get_cart_by_user(user_id)
        if not cart:
            return None, []
        return cart, self.repo.get_cart_items(cart.id)

    def clear(self, cart: CartModel) -> None:
        self.repo.clear_cart(cart.id)
        self._bump_version(cart)

    def _get_or_create_cart(self, user_id: int) -> CartModel:
        cart = self.repo.get_cart_by_user(user_id)
        if cart:
            return cart

        logger.info(f"Creating cart for user {user_id}")
        return self.repo.create_cart(CartModel(user_id=user_id, version=1))

    def _bump_version(self, cart: CartModel) -> None:
        # Optimistic locking warunek na wersje
        # np w bazie update set version 2 where id 1 and version 1
        rowcount = self.repo.update_cart_version(
            cart_id=cart.id,
            old_version=cart.version,
            new_data={
                "version": cart.version + 1,
                "updated_at": datetime.now(timezone.utc),
            },
        )

        if rowcount == 0:
            raise ConcurrentModification(
                "Cart was modified by another operation, retry the request", user_id=cart.user_id
            )
