"""Pydantic request/response schemas for the marketplace API.

Field names are snake_case in Python and camelCase on the wire; requests
accept either spelling.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Shared ---


class LocationSchema(CamelModel):
    address: str | None = Field(None, max_length=255)
    city: str | None = Field(None, max_length=100)
    state: str | None = Field(None, max_length=100)
    country: str | None = Field(None, max_length=100)
    zip_code: str | None = Field(None, max_length=20)


class ShippingAddressSchema(CamelModel):
    full_name: str = Field(..., max_length=150)
    phone: str = Field(..., max_length=20)
    address: str = Field(..., max_length=255)
    area: str | None = Field(None, max_length=150)
    city: str = Field(..., max_length=100)
    pin_code: str = Field(..., max_length=20, alias="pin_code")


class SuccessResponse(CamelModel):
    success: bool = True
    message: str | None = None


# --- Cart ---


class CartProduct(CamelModel):
    product_id: str
    farmer_id: str | None = None
    name: str | None = Field(None, max_length=255)
    price: float | None = Field(None, ge=0)
    unit: str | None = Field(None, max_length=50)
    quantity: int | None = None
    image: str | None = Field(None, max_length=1000)


class AddToCartRequest(CamelModel):
    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "product": {
                        "productId": "prod-001",
                        "farmerId": "farmer-001",
                        "name": "Tomatoes",
                        "price": 40.0,
                        "unit": "kg",
                        "quantity": 2,
                        "image": "https://cdn.example.com/tomatoes.jpg",
                    }
                }
            ]
        }
    )

    product: CartProduct


class UpdateCartRequest(CamelModel):
    product_id: str
    quantity: int


class RemoveFromCartRequest(CamelModel):
    product_id: str


class CartLineResponse(CamelModel):
    product_id: str
    farmer_id: str | None = None
    name: str | None = None
    price: float | None = None
    unit: str | None = None
    quantity: int
    image: str | None = None


class CartResponse(CamelModel):
    success: bool = True
    cart_items: list[CartLineResponse] = []


# --- Orders ---


class PlaceOrderRequest(CamelModel):
    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "shippingAddress": {
                        "fullName": "Asha Patel",
                        "phone": "9876543210",
                        "address": "12 Market Road",
                        "area": "Old Town",
                        "city": "Pune",
                        "pin_code": "411001",
                    },
                    "paymentMethod": "cod",
                    "deliveryCharge": 20.0,
                }
            ]
        }
    )

    shipping_address: ShippingAddressSchema
    payment_method: str = Field("cod", max_length=20)
    delivery_charge: float = Field(0.0, ge=0)


class UpdateOrderStatusRequest(CamelModel):
    status: str = Field(..., max_length=30)


class PartySummary(CamelModel):
    id: str
    full_name: str | None = None
    email: str | None = None
    phone_number: str | None = None
    profile_picture: str | None = None


class OrderItemResponse(CamelModel):
    product_id: str
    name: str | None = None
    price: float
    unit: str | None = None
    quantity: int
    image: str | None = None


class OrderResponse(CamelModel):
    id: str
    order_id: str
    consumer: PartySummary
    farmer: PartySummary
    items: list[OrderItemResponse]
    total_amount: float
    delivery_charge: float
    total_items: int
    grand_total: float
    shipping_address: ShippingAddressSchema | None = None
    status: str
    payment_status: str
    payment_method: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PlaceOrderResponse(CamelModel):
    success: bool = True
    message: str = "Orders placed successfully"
    orders: list[OrderResponse]
    count: int


class OrderListResponse(CamelModel):
    success: bool = True
    count: int
    orders: list[OrderResponse]


class OrderStatusResponse(CamelModel):
    success: bool = True
    order: OrderResponse


class TopFarmer(CamelModel):
    farmer_id: str
    full_name: str
    profile_picture: str | None = None
    location: LocationSchema | None = None
    total_sales: float
    order_count: int


class TopFarmersResponse(CamelModel):
    success: bool = True
    data: list[TopFarmer]


# --- Auth ---


class RegisterRequest(CamelModel):
    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "email": "ravi@example.com",
                    "password": "s3cret-pass",
                    "fullName": "Ravi Kumar",
                    "role": "farmer",
                    "phoneNumber": "9876500000",
                    "location": {"city": "Nashik", "state": "Maharashtra", "country": "India"},
                }
            ]
        }
    )

    email: str = Field(..., max_length=254)
    password: str = Field(..., min_length=6, max_length=128)
    full_name: str = Field(..., min_length=1, max_length=150)
    role: str = Field(..., max_length=20)
    phone_number: str | None = Field(None, max_length=20)
    profile_picture: str | None = Field(None, max_length=1000)
    location: LocationSchema | None = None


class LoginRequest(CamelModel):
    email: str = Field(..., max_length=254)
    password: str = Field(..., max_length=128)


class UserResponse(CamelModel):
    id: str
    email: str
    full_name: str
    role: str
    phone_number: str | None = None
    profile_picture: str | None = None
    location: LocationSchema | None = None
    created_at: datetime | None = None


class AuthResponse(CamelModel):
    success: bool = True
    message: str | None = None
    user: UserResponse
    token: str


class MeResponse(CamelModel):
    success: bool = True
    user: UserResponse


# --- Analytics ---


class SalesSummary(CamelModel):
    today_revenue: float
    today_orders: int
    today_aov: float
    monthly_revenue: float
    monthly_orders: int
    monthly_aov: float
    last_month_revenue: float
    last_month_orders: int
    monthly_growth: float
    last_90_days_revenue: float
    total_revenue: float
    total_orders: int
    unique_customers: int


class DailySales(CamelModel):
    date: str
    revenue: float
    orders: int
    avg_order_value: float


class MonthlySales(CamelModel):
    month: str
    revenue: float
    orders: int


class SalesCharts(CamelModel):
    daily_sales_30_days: list[DailySales]
    monthly_revenue_trend: list[MonthlySales]


class TopProduct(CamelModel):
    product_id: str
    name: str | None = None
    image: str | None = None
    unit: str | None = None
    total_qty: int
    total_sales: float


class PaymentShare(CamelModel):
    method: str
    count: int
    revenue: float
    percentage: float


class FarmerAnalytics(CamelModel):
    summary: SalesSummary
    charts: SalesCharts
    top_products: list[TopProduct]
    payment_breakdown: list[PaymentShare]
    active_order_status: dict[str, int]
    generated_at: str


class FarmerAnalyticsResponse(CamelModel):
    success: bool = True
    data: FarmerAnalytics
