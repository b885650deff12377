"""FastAPI routes for the marketplace: auth, cart, orders and analytics."""

import json

from fastapi import APIRouter, Depends, Response
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from marketplace.analytics.farmer_sales import farmer_sales_summary
from marketplace.analytics.top_farmers import top_farmers
from marketplace.api.dependencies import authenticated_user, require_farmer
from marketplace.api.schemas import (
    AddToCartRequest,
    AuthResponse,
    CartLineResponse,
    CartResponse,
    FarmerAnalyticsResponse,
    LoginRequest,
    MeResponse,
    OrderListResponse,
    OrderResponse,
    OrderStatusResponse,
    PlaceOrderRequest,
    PlaceOrderResponse,
    RegisterRequest,
    RemoveFromCartRequest,
    SuccessResponse,
    TopFarmersResponse,
    UpdateCartRequest,
    UpdateOrderStatusRequest,
    UserResponse,
)
from marketplace.cart.items import AddToCart, RemoveFromCart, UpdateCartQuantity
from marketplace.config import get_settings
from marketplace.errors import AuthenticationError
from marketplace.identity.passwords import hash_password, verify_password
from marketplace.identity.registration import RegisterUser
from marketplace.identity.tokens import TokenClaims, issue_token
from marketplace.identity.user import Role, User
from marketplace.order.lifecycle import UpdateOrderStatus
from marketplace.order.order import Order
from marketplace.order.placement import place_order

# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------


def _user_payload(user):
    return UserResponse(
        id=str(user.id),
        email=user.email,
        full_name=user.full_name,
        role=user.role,
        phone_number=user.phone_number,
        profile_picture=user.profile_picture,
        location=user.location.to_dict() if user.location else None,
        created_at=user.created_at,
    )


def _party(user_id, users):
    user = users.get(str(user_id))
    if user is None:
        return {"id": str(user_id)}
    return {
        "id": str(user.id),
        "full_name": user.full_name,
        "email": user.email,
        "phone_number": user.phone_number,
        "profile_picture": user.profile_picture,
    }


def _order_payloads(orders):
    """Serialise orders with their farmer and consumer populated."""
    party_ids = {str(order.farmer_id) for order in orders} | {str(order.consumer_id) for order in orders}
    users = current_domain.repository_for(User).find_many(party_ids)
    return [
        OrderResponse(
            id=str(order.id),
            order_id=order.order_id,
            consumer=_party(order.consumer_id, users),
            farmer=_party(order.farmer_id, users),
            items=[
                {
                    "product_id": str(item.product_id),
                    "name": item.name,
                    "price": item.price,
                    "unit": item.unit,
                    "quantity": item.quantity,
                    "image": item.image,
                }
                for item in order.items
            ],
            total_amount=order.total_amount,
            delivery_charge=order.delivery_charge or 0.0,
            total_items=order.total_items,
            grand_total=order.grand_total,
            shipping_address=order.shipping_address.to_dict() if order.shipping_address else None,
            status=order.status,
            payment_status=order.payment_status,
            payment_method=order.payment_method,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )
        for order in orders
    ]


def _cart_response(user_id):
    user = current_domain.repository_for(User).get(user_id)
    return CartResponse(
        cart_items=[
            CartLineResponse(
                product_id=str(line.product_id),
                farmer_id=str(line.farmer_id) if line.farmer_id else None,
                name=line.name,
                price=line.price,
                unit=line.unit,
                quantity=line.quantity,
                image=line.image,
            )
            for line in user.cart_items
        ]
    )


def _set_session_cookie(response: Response, token: str) -> None:
    settings = get_settings()
    response.set_cookie(
        key=settings.cookie_name,
        value=token,
        max_age=settings.token_ttl_days * 24 * 60 * 60,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="none" if settings.cookie_secure else "lax",
    )


# ---------------------------------------------------------------------------
# Auth Router
# ---------------------------------------------------------------------------
auth_router = APIRouter(prefix="/api/auth", tags=["auth"])


@auth_router.post("/register", status_code=201, response_model=AuthResponse)
async def register(body: RegisterRequest, response: Response) -> AuthResponse:
    if body.role not in {Role.FARMER.value, Role.CONSUMER.value}:
        raise ValidationError({"role": ["Role must be farmer or consumer"]})

    command = RegisterUser(
        email=body.email,
        password_hash=hash_password(body.password),
        full_name=body.full_name,
        role=body.role,
        phone_number=body.phone_number,
        profile_picture=body.profile_picture,
        location=json.dumps(body.location.model_dump()) if body.location else None,
    )
    user_id = current_domain.process(command, asynchronous=False)

    user = current_domain.repository_for(User).get(user_id)
    token = issue_token(user)
    _set_session_cookie(response, token)
    return AuthResponse(message="User registered successfully", user=_user_payload(user), token=token)


@auth_router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, response: Response) -> AuthResponse:
    user = current_domain.repository_for(User).find_by_email(body.email)
    if user is None or not verify_password(user.password_hash, body.password):
        raise AuthenticationError("Invalid email or password")

    token = issue_token(user)
    _set_session_cookie(response, token)
    return AuthResponse(message="Login successful", user=_user_payload(user), token=token)


@auth_router.post("/logout", response_model=SuccessResponse)
async def logout(response: Response) -> SuccessResponse:
    settings = get_settings()
    response.delete_cookie(
        key=settings.cookie_name,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="none" if settings.cookie_secure else "lax",
    )
    return SuccessResponse(message="Logged out successfully")


@auth_router.get("/me", response_model=MeResponse)
async def me(claims: TokenClaims = Depends(authenticated_user)) -> MeResponse:
    user = current_domain.repository_for(User).get(claims.user_id)
    return MeResponse(user=_user_payload(user))


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/api/cart", tags=["cart"])


@cart_router.post("/add", response_model=CartResponse)
async def add_to_cart(body: AddToCartRequest, claims: TokenClaims = Depends(authenticated_user)) -> CartResponse:
    product = body.product
    command = AddToCart(
        user_id=claims.user_id,
        product_id=product.product_id,
        farmer_id=product.farmer_id,
        name=product.name,
        price=product.price,
        unit=product.unit,
        quantity=product.quantity if product.quantity is not None else 1,
        image=product.image,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_response(claims.user_id)


@cart_router.post("/update-cart", response_model=CartResponse)
async def update_cart(body: UpdateCartRequest, claims: TokenClaims = Depends(authenticated_user)) -> CartResponse:
    command = UpdateCartQuantity(
        user_id=claims.user_id,
        product_id=body.product_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_response(claims.user_id)


@cart_router.post("/remove", response_model=CartResponse)
async def remove_from_cart(
    body: RemoveFromCartRequest, claims: TokenClaims = Depends(authenticated_user)
) -> CartResponse:
    command = RemoveFromCart(
        user_id=claims.user_id,
        product_id=body.product_id,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_response(claims.user_id)


@cart_router.get("/get-cart", response_model=CartResponse)
async def get_cart(claims: TokenClaims = Depends(authenticated_user)) -> CartResponse:
    return _cart_response(claims.user_id)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/api/order", tags=["orders"])


@order_router.post("/place-order", status_code=201, response_model=PlaceOrderResponse)
async def place_order_route(
    body: PlaceOrderRequest, claims: TokenClaims = Depends(authenticated_user)
) -> PlaceOrderResponse:
    orders = place_order(
        consumer_id=claims.user_id,
        shipping_address=body.shipping_address.model_dump(),
        payment_method=body.payment_method,
        delivery_charge=body.delivery_charge,
    )
    return PlaceOrderResponse(orders=_order_payloads(orders), count=len(orders))


@order_router.get("/user-orders", response_model=OrderListResponse)
async def user_orders(claims: TokenClaims = Depends(authenticated_user)) -> OrderListResponse:
    orders = current_domain.repository_for(Order).for_consumer(claims.user_id)
    return OrderListResponse(count=len(orders), orders=_order_payloads(orders))


@order_router.get("/farmer-orders", response_model=OrderListResponse)
async def farmer_orders(claims: TokenClaims = Depends(require_farmer)) -> OrderListResponse:
    orders = current_domain.repository_for(Order).for_farmer(claims.user_id)
    return OrderListResponse(count=len(orders), orders=_order_payloads(orders))


@order_router.patch("/{order_id}/status", response_model=OrderStatusResponse)
async def update_order_status(
    order_id: str, body: UpdateOrderStatusRequest, claims: TokenClaims = Depends(require_farmer)
) -> OrderStatusResponse:
    command = UpdateOrderStatus(
        order_id=order_id,
        farmer_id=claims.user_id,
        status=body.status,
    )
    order_uuid = current_domain.process(command, asynchronous=False)

    order = current_domain.repository_for(Order).get(order_uuid)
    return OrderStatusResponse(order=_order_payloads([order])[0])


@order_router.get("/top-farmers", response_model=TopFarmersResponse)
async def get_top_farmers() -> TopFarmersResponse:
    return TopFarmersResponse(data=top_farmers())


# ---------------------------------------------------------------------------
# Analytics Router
# ---------------------------------------------------------------------------
analytics_router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@analytics_router.get("/farmer", response_model=FarmerAnalyticsResponse)
async def farmer_analytics(claims: TokenClaims = Depends(require_farmer)) -> FarmerAnalyticsResponse:
    return FarmerAnalyticsResponse(data=farmer_sales_summary(claims.user_id))
