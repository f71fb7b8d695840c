from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from storefront.checkout.models import ShippingDetails


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class OrderItem(BaseModel):
    """Copie figée d'une ligne de panier au moment de la commande."""
    model_config = ConfigDict(extra="ignore")

    product_id: str
    name: str = ""
    unit_price: int = Field(ge=0)
    color: str = ""
    size: str = ""
    quantity: int = Field(ge=1)
    image: Optional[str] = None

    @property
    def line_total(self) -> int:
        return self.unit_price * self.quantity


class Order(BaseModel):
    model_config = ConfigDict(extra="ignore", use_enum_values=True)

    id: Optional[str] = None
    order_number: str
    user_id: Optional[str] = None
    user_email: str
    user_phone: str = ""
    items: List[OrderItem]
    shipping_address: ShippingDetails
    subtotal: int = Field(ge=0)
    shipping_cost: int = Field(default=0, ge=0)
    total: int = Field(ge=0)
    currency: str = "INR"
    payment_method: str = "razorpay"
    payment_reference: Optional[str] = None
    gateway_order_id: Optional[str] = None
    payment_status: PaymentStatus = PaymentStatus.PENDING
    status: OrderStatus = OrderStatus.PENDING
    tracking_number: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_document(self) -> Dict[str, Any]:
        # id, created_at et updated_at sont attribués par la couche de persistance
        return self.model_dump(mode="json", exclude={"id", "created_at", "updated_at"}, exclude_none=True)
