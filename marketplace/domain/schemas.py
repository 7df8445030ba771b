# marketplace/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class AdminStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


SettingType = Literal["string", "number", "boolean", "json"]


# koperta odpowiedzi

class Envelope(BaseModel, Generic[T]):
    success: bool = True
    data: T


class PaginationMeta(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class Paginated(BaseModel, Generic[T]):
    items: List[T]
    pagination: PaginationMeta


# checkout

class ShippingAddress(BaseModel):
    """Adres dostawy zapisywany razem z zamowieniem."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    recipient_name: Optional[str] = Field(None, max_length=200)
    street: str = Field(..., min_length=1, max_length=200)
    line2: Optional[str] = Field(None, max_length=200)
    city: str = Field(..., min_length=1, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    postal_code: str = Field(..., min_length=1, max_length=20)
    country: str = Field(..., min_length=2, max_length=56)


class CartItemIn(BaseModel):
    """Pozycja koszyka, istnieje tylko na czas checkoutu."""

    provider_set_id: int = Field(..., gt=0, description="ID oferty providera (musi być > 0)")
    quantity: int = Field(..., gt=0, description="Ilość (musi być > 0)")


class CheckoutIn(BaseModel):
    """Schema dla tworzenia zamówienia (checkout)."""

    provider_id: int = Field(..., gt=0)
    items: List[CartItemIn] = Field(..., min_length=1)
    shipping_address: ShippingAddress


class OrderItemOut(BaseModel):
    id: int
    set_id: int
    provider_set_id: int
    set_name: Optional[str] = None
    quantity: int
    unit_price: Decimal
    line_total: Decimal


class OrderOut(BaseModel):
    """Schema dla zamówienia (response)."""

    id: int
    order_number: str
    customer_id: int
    provider_id: int
    status: OrderStatus
    total_amount: Decimal
    currency: str
    shipping_address: dict
    printed: bool
    created_at: datetime
    updated_at: datetime
    items: Optional[List[OrderItemOut]] = None


class OrderPatch(BaseModel):
    """Zmiana zamówienia, stosowane sa tylko pola przeslane w zadaniu."""

    model_config = ConfigDict(extra="forbid")

    status: Optional[OrderStatus] = None
    printed: Optional[bool] = None


class OrderFilters(BaseModel):
    customer_id: Optional[int] = None
    provider_id: Optional[int] = None
    status: Optional[OrderStatus] = None
    order_number: Optional[str] = None


class OrderStatsOut(BaseModel):
    """Pulpit zalezny od roli, pola spoza roli sa pomijane w odpowiedzi."""

    users: Optional[int] = None
    sets: Optional[int] = None
    provider_sets: Optional[int] = None
    orders: Optional[int] = None
    pending_orders: Optional[int] = None
    total_revenue: Optional[Decimal] = None


# oferty providerow

class ProviderSetCreate(BaseModel):
    set_id: int = Field(..., gt=0)
    price: Decimal = Field(..., ge=0)
    available_quantity: int = Field(0, ge=0)
    is_active: bool = True
    provider_visible: bool = True
    provider_id: Optional[int] = Field(None, gt=0, description="Tylko admin moze wskazac providera")


class ProviderSetPatch(BaseModel):
    model_config = ConfigDict(extra="forbid")

    price: Optional[Decimal] = Field(None, ge=0)
    available_quantity: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None
    provider_visible: Optional[bool] = None
    admin_visible: Optional[bool] = None
    admin_status: Optional[AdminStatus] = None
    admin_notes: Optional[str] = None


class ProviderSetFilters(BaseModel):
    provider_id: Optional[int] = None
    set_id: Optional[int] = None
    is_active: Optional[bool] = None
    admin_status: Optional[AdminStatus] = None


class ProviderSetOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    provider_id: int
    set_id: int
    set_name: Optional[str] = None
    price: Decimal
    available_quantity: int
    is_active: bool
    provider_visible: bool
    admin_visible: bool
    admin_status: AdminStatus
    admin_notes: Optional[str] = None
    version: int
    created_at: datetime
    updated_at: datetime


class ShopFilters(BaseModel):
    provider_id: Optional[int] = None
    category: Optional[str] = None
    search: Optional[str] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None


class ShopSetOut(BaseModel):
    provider_set_id: int
    provider_id: int
    provider_name: Optional[str] = None
    set_id: int
    set_name: str
    set_description: Optional[str] = None
    set_category: Optional[str] = None
    difficulty_level: Optional[str] = None
    price: Decimal
    available_quantity: int


# katalog

class CatalogSetCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)
    difficulty_level: Optional[str] = Field(None, max_length=50)
    base_price: Optional[Decimal] = Field(None, ge=0)
    active: bool = True
    admin_visible: bool = True


class CatalogSetOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    difficulty_level: Optional[str] = None
    base_price: Optional[Decimal] = None
    active: bool
    admin_visible: bool
    created_at: datetime


# ustawienia

class SettingUpdate(BaseModel):
    value: Any = Field(...)
    type: SettingType = "string"
    description: Optional[str] = None


class SettingOut(BaseModel):
    setting: str
    value: Any
    type: SettingType
