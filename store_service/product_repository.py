"""
Product Repository Module

CRUD over the ``products`` collection. Products are schema-less JSON
objects; the only field the service owns is ``id``, assigned on create
as the highest existing id plus one (1 for an empty collection).

Each call loads the full snapshot from the record store, and each
mutating call saves the full snapshot back while holding the collection
lock.

Example Usage:
    ```python
    repo = ProductRepository(store)

    pen = repo.create_product({"name": "pen", "price": 1.5})
    # {"id": 1, "name": "pen", "price": 1.5}

    repo.update_product(1, {"price": 2.0})
    # {"id": 1, "name": "pen", "price": 2.0}

    repo.delete_product(1)
    repo.get_product(1)  # raises ProductNotFound
    ```
"""

import logging
from typing import Any, Dict, List

from shared.record_store import Record

from .base_repository import BaseRepository, ProductNotFound, find_index, next_id

logger = logging.getLogger(__name__)


class ProductRepository(BaseRepository):
    """Repository for the products collection."""

    collection = "products"

    def list_products(self) -> List[Record]:
        """Return every product in insertion order."""
        return self._snapshot()

    def get_product(self, product_id: Any) -> Record:
        """Return the product with ``product_id`` or raise ProductNotFound."""
        products = self._snapshot()
        index = find_index(products, product_id)
        if index is None:
            self._log_missing("Product", product_id)
            raise ProductNotFound(product_id)
        return products[index]

    def create_product(self, fields: Dict[str, Any]) -> Record:
        """Append a new product; any client-sent ``id`` is replaced."""
        with self._locked():
            products = self._snapshot()
            product = self._copy_fields(fields)
            product.pop("id", None)
            product = {"id": next_id(products), **product}
            products.append(product)
            self._persist(products)

        logger.info(f"Created product {product['id']}", extra={"collection": self.collection})
        return product

    def update_product(self, product_id: Any, fields: Dict[str, Any]) -> Record:
        """Shallow-merge ``fields`` over the stored product, keeping its id."""
        with self._locked():
            products = self._snapshot()
            index = find_index(products, product_id)
            if index is None:
                self._log_missing("Product", product_id)
                raise ProductNotFound(product_id)

            changes = self._copy_fields(fields)
            changes.pop("id", None)
            updated = {**products[index], **changes}
            products[index] = updated
            self._persist(products)

        logger.info(
            f"Updated product {updated['id']} fields {sorted(changes)}",
            extra={"collection": self.collection},
        )
        return updated

    def delete_product(self, product_id: Any) -> Record:
        """Remove the product and return it. Carts referencing it are left as they are."""
        with self._locked():
            products = self._snapshot()
            index = find_index(products, product_id)
            if index is None:
                self._log_missing("Product", product_id)
                raise ProductNotFound(product_id)

            removed = products.pop(index)
            self._persist(products)

        logger.info(f"Deleted product {removed['id']}", extra={"collection": self.collection})
        return removed
