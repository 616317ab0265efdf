from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class CartCreateRequest(BaseModel):
    """Request model for creating a cart. Lines are stored as sent."""

    products: Optional[List[Dict[str, Any]]] = None


class AddProductRequest(BaseModel):
    """Request model for adding a product to a cart."""

    quantity: Optional[Any] = None


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str
    service: str
    version: str
