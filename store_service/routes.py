from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Request, status

from shared.record_store import RecordStore

from .cart_repository import CartRepository
from .product_repository import ProductRepository
from .schemas import AddProductRequest, CartCreateRequest

router = APIRouter(prefix="/api")


def get_store(request: Request) -> RecordStore:
    """Record store attached to the app by create_app."""
    return request.app.state.store


def get_product_repo(store: RecordStore = Depends(get_store)) -> ProductRepository:
    return ProductRepository(store)


def get_cart_repo(store: RecordStore = Depends(get_store)) -> CartRepository:
    return CartRepository(store)


# Products

@router.get("/products", tags=["products"])
async def list_products(repo: ProductRepository = Depends(get_product_repo)) -> List[Dict[str, Any]]:
    """List all products."""
    return repo.list_products()


@router.get("/products/{pid}", tags=["products"])
async def get_product(pid: str, repo: ProductRepository = Depends(get_product_repo)) -> Dict[str, Any]:
    """Get one product by id."""
    return repo.get_product(pid)


@router.post("/products", status_code=status.HTTP_201_CREATED, tags=["products"])
async def create_product(
    fields: Optional[Dict[str, Any]] = Body(None),
    repo: ProductRepository = Depends(get_product_repo),
) -> Dict[str, Any]:
    """Create a product from whatever fields the client sends; no body means no fields."""
    return repo.create_product(fields or {})


@router.put("/products/{pid}", tags=["products"])
async def update_product(
    pid: str,
    fields: Optional[Dict[str, Any]] = Body(None),
    repo: ProductRepository = Depends(get_product_repo),
) -> Dict[str, Any]:
    """Merge the sent fields into an existing product."""
    return repo.update_product(pid, fields or {})


@router.delete("/products/{pid}", tags=["products"])
async def delete_product(pid: str, repo: ProductRepository = Depends(get_product_repo)) -> Dict[str, Any]:
    """Delete a product and return it."""
    return repo.delete_product(pid)


# Carts

@router.get("/carts/{cid}", tags=["carts"])
async def list_cart_products(cid: str, repo: CartRepository = Depends(get_cart_repo)) -> List[Dict[str, Any]]:
    """List the lines of a cart."""
    return repo.list_cart_products(cid)


@router.post("/carts", status_code=status.HTTP_201_CREATED, tags=["carts"])
async def create_cart(
    request: Optional[CartCreateRequest] = None,
    repo: CartRepository = Depends(get_cart_repo),
) -> Dict[str, Any]:
    """Create a cart, optionally seeded with lines."""
    lines = request.products if request is not None else None
    return repo.create_cart(lines)


@router.post("/carts/{cid}/product/{pid}", tags=["carts"])
async def add_product_to_cart(
    cid: str,
    pid: str,
    request: Optional[AddProductRequest] = None,
    repo: CartRepository = Depends(get_cart_repo),
) -> Dict[str, Any]:
    """Add a product to a cart, incrementing its line if already present."""
    quantity = request.quantity if request is not None else None
    return repo.add_product(cid, pid, quantity)
