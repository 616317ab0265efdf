"""
Cart Repository Module

Shopping carts persisted in the ``carts`` collection. A cart is
``{"id": <int>, "products": [<line>, ...]}`` where each line is
``{"id": <product id>, "quantity": <number>}``. Lines keep the order in
which products were first added, and a product appears at most once
per cart: adding it again increments the existing line.

Adding a product reads the ``products`` collection to check the
product exists; that collection is never written here. There is no
referential integrity afterwards, so a product deleted later stays
referenced by any cart holding it.

Data Format:
    [
      {
        "id": 1,
        "products": [
          {"id": 1, "quantity": 4},
          {"id": 3, "quantity": 1}
        ]
      }
    ]

Example Usage:
    ```python
    carts = CartRepository(store)

    cart = carts.create_cart()
    # {"id": 1, "products": []}

    carts.add_product(1, 1)
    carts.add_product(1, 1, quantity=3)
    carts.list_cart_products(1)
    # [{"id": 1, "quantity": 4}]
    ```
"""

import logging
from typing import Any, Dict, List, Optional

from shared.record_store import Record

from .base_repository import BaseRepository, CartNotFound, find_index, next_id, same_id
from .product_repository import ProductRepository

logger = logging.getLogger(__name__)

DEFAULT_QUANTITY = 1


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def merge_quantity(current: Any, amount: Any) -> Any:
    """Quantity of an existing line after adding ``amount``.

    Numbers add up. A line without a quantity takes ``amount``, and so
    does any pairing where one side is not a number.
    """
    if _is_number(current) and _is_number(amount):
        return current + amount
    return amount


class CartRepository(BaseRepository):
    """Repository for the carts collection."""

    collection = "carts"

    def __init__(self, store, products: Optional[ProductRepository] = None):
        """Initialize with the record store and the product lookup used by add_product."""
        super().__init__(store)
        self.products = products or ProductRepository(store)

    def get_cart(self, cart_id: Any) -> Record:
        """Return the cart with ``cart_id`` or raise CartNotFound."""
        carts = self._snapshot()
        index = find_index(carts, cart_id)
        if index is None:
            self._log_missing("Cart", cart_id)
            raise CartNotFound(cart_id)
        return carts[index]

    def list_cart_products(self, cart_id: Any) -> List[Dict[str, Any]]:
        """Return the lines of a cart."""
        return self.get_cart(cart_id).get("products", [])

    def create_cart(self, products: Optional[List[Dict[str, Any]]] = None) -> Record:
        """Create a cart, empty unless initial lines are supplied.

        Initial lines are stored as given; duplicates among them are not
        merged.
        """
        with self._locked():
            carts = self._snapshot()
            cart = {"id": next_id(carts), "products": [dict(line) for line in products or []]}
            carts.append(cart)
            self._persist(carts)

        logger.info(
            f"Created cart {cart['id']} with {len(cart['products'])} lines",
            extra={"collection": self.collection},
        )
        return cart

    def add_product(self, cart_id: Any, product_id: Any, quantity: Any = None) -> Record:
        """Add ``quantity`` of a product to a cart and return the updated cart.

        A missing, null or zero quantity counts as 1; anything else is taken
        as sent, see merge_quantity for how it combines with an existing
        line. Raises CartNotFound before the product is looked up, then
        ProductNotFound.
        """
        amount = quantity or DEFAULT_QUANTITY

        with self._locked():
            carts = self._snapshot()
            index = find_index(carts, cart_id)
            if index is None:
                self._log_missing("Cart", cart_id)
                raise CartNotFound(cart_id)

            product = self.products.get_product(product_id)

            cart = carts[index]
            lines = cart.setdefault("products", [])
            line = next(
                (line for line in lines if isinstance(line, dict) and same_id(line, product["id"])),
                None,
            )
            if line is not None:
                previous = line.get("quantity")
                line["quantity"] = merge_quantity(previous, amount)
                if not (_is_number(previous) and _is_number(amount)):
                    logger.warning(
                        f"Cart {cart['id']} line {product['id']}: quantity {previous!r} replaced by {amount!r}",
                        extra={"collection": self.collection},
                    )
            else:
                line = {"id": product["id"], "quantity": amount}
                lines.append(line)

            self._persist(carts)

        logger.info(
            f"Added product {product['id']} to cart {cart['id']} (quantity now {line['quantity']})",
            extra={"collection": self.collection},
        )
        return cart
