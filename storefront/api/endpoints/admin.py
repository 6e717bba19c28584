"""Admin endpoints: product CRUD, order and donation listings, order status, email check."""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from storefront.api.dependencies import (
    admin_api_key_protection,
    get_email_service,
    get_repository,
    get_shop_config,
)
from storefront.catalog.validation import (
    ProductValidationError,
    is_valid_availability,
    validate_product_variation,
)
from storefront.database.records import DuplicateSlugError
from storefront.integrations.email.templates import OrderStatusUpdateData
from storefront.services.order_service import format_order_number
from storefront.utils.form_validation import validate_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", dependencies=[Depends(admin_api_key_protection)])


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProductCreateRequest(_CamelModel):
    slug: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    category: str
    price: float = Field(..., ge=0)
    description: str
    currency: str = "GHS"
    tags: List[str] = Field(default_factory=list)
    impact_statement: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    availability: str = "in_stock"
    inventory: int = Field(default=0, ge=0)
    variations: List[Dict[str, Any]] = Field(default_factory=list)


class ProductUpdateRequest(_CamelModel):
    slug: Optional[str] = Field(default=None, min_length=1)
    name: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    description: Optional[str] = None
    currency: Optional[str] = None
    tags: Optional[List[str]] = None
    impact_statement: Optional[str] = None
    images: Optional[List[str]] = None
    availability: Optional[str] = None
    inventory: Optional[int] = Field(default=None, ge=0)
    variations: Optional[List[Dict[str, Any]]] = None


class OrderStatusRequest(_CamelModel):
    status: Optional[str] = None
    tracking_number: Optional[str] = None
    estimated_delivery: Optional[str] = None


class EmailCheckRequest(BaseModel):
    email: Optional[str] = None


def _checked_product_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    availability = data.get("availability")
    if availability is not None and not is_valid_availability(availability):
        raise HTTPException(status_code=400, detail=f"Invalid availability: {availability}")

    if data.get("variations"):
        try:
            data["variations"] = [validate_product_variation(v).to_wire() for v in data["variations"]]
        except ProductValidationError as e:
            raise HTTPException(status_code=400, detail=str(e))
    return data


# ============================================================================
# Products
# ============================================================================

@router.post("/products", tags=["Admin"])
async def create_product(request: ProductCreateRequest, repository=Depends(get_repository)):
    data = _checked_product_fields(request.model_dump())
    try:
        product = repository.create_product(data)
    except DuplicateSlugError as e:
        raise HTTPException(status_code=409, detail=str(e))
    logger.info("Created product %s (%s)", product.id, product.slug)
    return {"product": product.to_dict()}


@router.put("/products/{product_id}", tags=["Admin"])
async def update_product(product_id: int, request: ProductUpdateRequest, repository=Depends(get_repository)):
    data = _checked_product_fields(request.model_dump(exclude_unset=True))
    try:
        product = repository.update_product(product_id, data)
    except DuplicateSlugError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return {"product": product.to_dict()}


@router.delete("/products/{product_id}", tags=["Admin"])
async def delete_product(product_id: int, repository=Depends(get_repository)):
    if not repository.delete_product(product_id):
        raise HTTPException(status_code=404, detail="Product not found")
    return {"message": "Product deleted successfully"}


# ============================================================================
# Orders & donations
# ============================================================================

@router.get("/orders", tags=["Admin"])
async def list_orders(repository=Depends(get_repository)):
    return {"orders": [o.to_dict() for o in repository.list_orders()]}


@router.get("/donations", tags=["Admin"])
async def list_donations(repository=Depends(get_repository)):
    return {"donations": [d.to_dict() for d in repository.list_donations()]}


@router.put("/orders/{order_id}", tags=["Admin"])
async def update_order_status(
    order_id: int,
    request: OrderStatusRequest,
    repository=Depends(get_repository),
    email_service=Depends(get_email_service),
    config=Depends(get_shop_config),
):
    new_status = request.status
    if not new_status:
        raise HTTPException(status_code=400, detail="Status is required")
    if new_status not in config.checkout.order_statuses:
        raise HTTPException(status_code=400, detail="Invalid status")

    current = repository.get_order_by_id(order_id)
    if current is None:
        raise HTTPException(status_code=404, detail="Order not found")

    order = repository.update_order_status(order_id, new_status)

    if current.status != new_status and current.customer_email and new_status in config.checkout.notify_statuses:
        try:
            await email_service.send_order_status_update(
                OrderStatusUpdateData(
                    customer_name=current.customer_name,
                    customer_email=current.customer_email,
                    order_number=format_order_number(current.id),
                    status=new_status,
                    tracking_number=request.tracking_number or None,
                    estimated_delivery=request.estimated_delivery or None,
                )
            )
        except Exception as e:
            logger.error("Failed to send order status update email for order %s: %s", order_id, e)

    return {"order": order.to_dict()}


# ============================================================================
# Email
# ============================================================================

@router.post("/test-email", tags=["Admin"])
async def send_test_email(request: EmailCheckRequest, email_service=Depends(get_email_service)):
    recipient = (request.email or "").strip()
    if not validate_email(recipient):
        raise HTTPException(status_code=400, detail="Valid email address is required")

    if not await email_service.test_connection():
        raise HTTPException(status_code=500, detail="Email service connection failed")

    try:
        await email_service.send_test_email(recipient)
    except Exception as e:
        logger.error("Test email failed: %s", e)
        raise HTTPException(status_code=500, detail={"message": "Failed to send test email", "details": str(e)})

    return {
        "message": "Test email sent successfully",
        "recipient": recipient,
        "timestamp": datetime.utcnow().isoformat(),
    }
