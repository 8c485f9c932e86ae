"""
Pydantic schemas for request bodies and responses.

JSON uses camelCase on the wire (``tableNumber``, ``isAvailable``); Python
code uses snake_case. Money is carried as Decimal and serialized as a
number.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from shared.config.constants import Limits


# =============================================================================
# Common Types
# =============================================================================

Money = Annotated[
    Decimal,
    PlainSerializer(lambda v: float(v), return_type=float, when_used="json"),
]

OrderStatusLiteral = Literal["received", "preparing", "quality_check", "ready", "delivered", "cancelled"]
CategoryLiteral = Literal["Appetizers", "Main Course", "Desserts", "Drinks"]
PortionLiteral = Literal["Standard", "Large"]
StaffRoleLiteral = Literal["admin", "manager", "kitchen_staff"]
DietaryPlanLiteral = Literal["", "Vegetarian", "Vegan", "Paleo", "Keto"]
WaiterRequestLiteral = Literal["waiter", "water", "help"]
PeriodLiteral = Literal["today", "week", "month", "year"]

TableNumber = Annotated[int, Field(ge=Limits.MIN_TABLE_NUMBER, le=Limits.MAX_TABLE_NUMBER)]
Quantity = Annotated[int, Field(ge=1, le=99)]
Rating = Annotated[int, Field(ge=Limits.MIN_RATING, le=Limits.MAX_RATING)]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(CamelModel):
    message: str


# =============================================================================
# Auth and health profile
# =============================================================================


class HealthProfileInput(CamelModel):
    allergies: list[str] = Field(default_factory=list, max_length=30)
    dietary_plan: DietaryPlanLiteral = ""
    health_goals: list[str] = Field(default_factory=list, max_length=20)


class HealthProfileOutput(CamelModel):
    allergies: list[str]
    dietary_plan: str
    health_goals: list[str]
    is_created: bool


class RegisterRequest(CamelModel):
    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    phone: str | None = Field(default=None, max_length=30)
    health_profile: HealthProfileInput | None = None


class LoginRequest(CamelModel):
    email: EmailStr
    password: str


class UserOutput(CamelModel):
    id: int
    name: str
    email: str
    phone: str | None = None
    role: str
    is_active: bool
    health_profile: HealthProfileOutput


class AuthResponse(CamelModel):
    user: UserOutput
    token: str


class UserResponse(CamelModel):
    user: UserOutput


# =============================================================================
# Menu
# =============================================================================


class Nutrition(CamelModel):
    calories: float = Field(default=0, ge=0)
    protein: float = Field(default=0, ge=0)
    carbs: float = Field(default=0, ge=0)
    fat: float = Field(default=0, ge=0)
    sodium: float = Field(default=0, ge=0)
    fiber: float = Field(default=0, ge=0)


class MenuItemCreate(CamelModel):
    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    description: str = Field(default="", max_length=Limits.MAX_DESCRIPTION_LENGTH)
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    category: CategoryLiteral
    image: str | None = Field(default=None, max_length=2048)
    is_available: bool = True
    ingredients: list[str] = Field(default_factory=list)
    allergens: list[str] = Field(default_factory=list)
    serves: int = Field(default=1, ge=1, le=20)
    preparation_time: int = Field(default=15, ge=0, le=240)
    nutrition_per_serving: Nutrition = Field(default_factory=Nutrition)


class MenuItemUpdate(CamelModel):
    """Partial update: only fields that are sent are changed."""

    name: str | None = Field(default=None, min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    description: str | None = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)
    price: Decimal | None = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    category: CategoryLiteral | None = None
    image: str | None = Field(default=None, max_length=2048)
    is_available: bool | None = None
    ingredients: list[str] | None = None
    allergens: list[str] | None = None
    serves: int | None = Field(default=None, ge=1, le=20)
    preparation_time: int | None = Field(default=None, ge=0, le=240)
    nutrition_per_serving: Nutrition | None = None


class AvailabilityUpdate(CamelModel):
    is_available: bool


class MenuItemOutput(CamelModel):
    id: int
    name: str
    description: str
    price: Money
    category: str
    image: str | None = None
    is_available: bool
    ingredients: list[str]
    allergens: list[str]
    serves: int
    preparation_time: int
    nutrition_per_serving: Nutrition


class MenuListResponse(CamelModel):
    items: list[MenuItemOutput]


class MenuItemResponse(CamelModel):
    item: MenuItemOutput


class CategoriesResponse(CamelModel):
    categories: list[str]


# =============================================================================
# Cart
# =============================================================================


class Customizations(CamelModel):
    portion: PortionLiteral = "Standard"
    spice_level: str | None = Field(default=None, max_length=30)
    removed_ingredients: list[str] = Field(default_factory=list)
    special_instructions: str | None = Field(default=None, max_length=Limits.MAX_NOTE_LENGTH)


class CartLine(CamelModel):
    """A pending line as stored in the client session."""

    menu_item_id: int
    name: str
    unit_price: Money
    quantity: int
    customizations: Customizations = Field(default_factory=Customizations)


class CartLineOutput(CartLine):
    line_total: Money


class CartItemAdd(CamelModel):
    menu_item_id: int
    quantity: Quantity = 1
    customizations: Customizations = Field(default_factory=Customizations)


class CartQuantityUpdate(CamelModel):
    # Out-of-range values are clamped by the cart, not rejected
    quantity: int


class CartTableUpdate(CamelModel):
    table_number: TableNumber


class CartOutput(CamelModel):
    items: list[CartLineOutput]
    table_number: int | None
    subtotal: Money
    tax: Money
    total: Money
    item_count: int


class CartResponse(CamelModel):
    cart: CartOutput


class CheckoutRequest(CamelModel):
    guest_name: str | None = Field(default=None, max_length=100)
    special_requests: str | None = Field(default=None, max_length=Limits.MAX_NOTE_LENGTH)


# =============================================================================
# Orders
# =============================================================================


class OrderItemInput(CamelModel):
    menu_item_id: int
    quantity: Quantity = 1
    customizations: Customizations = Field(default_factory=Customizations)


class OrderCreate(CamelModel):
    table_number: TableNumber
    items: list[OrderItemInput] = Field(min_length=1, max_length=50)
    guest_name: str | None = Field(default=None, max_length=100)
    special_requests: str | None = Field(default=None, max_length=Limits.MAX_NOTE_LENGTH)


class OrderItemOutput(CamelModel):
    id: int
    menu_item_id: int
    name: str
    unit_price: Money
    quantity: int
    portion: str
    spice_level: str | None = None
    removed_ingredients: list[str]
    special_instructions: str | None = None
    line_total: Money


class OrderOutput(CamelModel):
    id: int
    order_number: str
    table_number: int
    customer_id: int | None = None
    guest_name: str | None = None
    items: list[OrderItemOutput]
    subtotal: Money
    tax: Money
    total: Money
    status: str
    priority: int
    version: int
    estimated_prep_time: int | None = None
    special_requests: str | None = None
    allergy_alerts: list[str]
    created_at: datetime
    updated_at: datetime | None = None
    preparing_at: datetime | None = None
    ready_at: datetime | None = None
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None
    handled_by_id: int | None = None


class OrderResponse(CamelModel):
    order: OrderOutput


class OrderListResponse(CamelModel):
    orders: list[OrderOutput]


class KitchenQueueResponse(CamelModel):
    queue: dict[str, list[OrderOutput]]


class StatusUpdate(CamelModel):
    status: OrderStatusLiteral
    expected_version: int | None = Field(default=None, ge=1)


class AdvanceRequest(CamelModel):
    expected_version: int | None = Field(default=None, ge=1)


class PriorityUpdate(CamelModel):
    priority: int = Field(ge=1, le=3)
    expected_version: int | None = Field(default=None, ge=1)


class WaiterRequestInput(CamelModel):
    type: WaiterRequestLiteral = "waiter"
    message: str | None = Field(default=None, max_length=300)


# =============================================================================
# Feedback
# =============================================================================


class FeedbackCreate(CamelModel):
    order_id: int
    food_rating: Rating
    service_rating: Rating
    overall_rating: Rating
    comment: str | None = Field(default=None, max_length=1000)
    would_recommend: bool = True


class FeedbackCustomer(CamelModel):
    name: str


class FeedbackOrderRef(CamelModel):
    id: int
    order_number: str


class FeedbackOutput(CamelModel):
    id: int
    order_id: int
    table_number: int
    food_rating: int
    service_rating: int
    overall_rating: int
    comment: str | None = None
    would_recommend: bool
    created_at: datetime
    customer: FeedbackCustomer | None = None
    order: FeedbackOrderRef


class FeedbackResponse(CamelModel):
    feedback: FeedbackOutput


class FeedbackListResponse(CamelModel):
    feedback: list[FeedbackOutput]


class FeedbackStats(CamelModel):
    avg_food_rating: float
    avg_service_rating: float
    avg_overall_rating: float
    recommendation_rate: float
    total_feedback: int


# =============================================================================
# Admin reporting
# =============================================================================


class TodayStats(CamelModel):
    orders: int
    revenue: Money
    active_orders: int
    tables_occupied: int
    total_tables: int
    avg_prep_time: float
    avg_rating: float


class DashboardResponse(CamelModel):
    today_stats: TodayStats


class PopularItem(CamelModel):
    menu_item_id: int
    name: str
    category: str
    total_ordered: int
    revenue: Money


class RevenueDay(CamelModel):
    date: str
    revenue: Money
    orders: int


class AnalyticsResponse(CamelModel):
    period: str
    total_orders: int
    total_revenue: Money
    avg_order_value: Money
    orders_by_status: dict[str, int]
    popular_items: list[PopularItem]
    revenue_by_day: list[RevenueDay]


class ServiceMetrics(CamelModel):
    avg_prep_time: float
    avg_total_time: float
    max_prep_time: float
    min_prep_time: float
    order_accuracy: float
    total_orders: int


class ServiceMetricsResponse(CamelModel):
    metrics: ServiceMetrics


class StaffCreate(CamelModel):
    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    phone: str | None = Field(default=None, max_length=30)
    role: StaffRoleLiteral


class StaffOutput(CamelModel):
    id: int
    name: str
    email: str
    phone: str | None = None
    role: str
    is_active: bool
    created_at: datetime


class StaffResponse(CamelModel):
    staff: StaffOutput


class StaffListResponse(CamelModel):
    staff: list[StaffOutput]


class StaffPerformance(CamelModel):
    staff_id: int
    name: str
    role: str
    orders_handled: int
    avg_prep_time: float


class StaffPerformanceResponse(CamelModel):
    performance: list[StaffPerformance]


# =============================================================================
# Tables, recommendations, health
# =============================================================================


class TableOutput(CamelModel):
    number: int
    capacity: int
    status: str
    active_orders: int


class TableScanResponse(CamelModel):
    table: TableOutput


class RecommendationReason(CamelModel):
    text: str
    type: Literal["health", "dietary", "popular"]


class Recommendation(MenuItemOutput):
    score: float
    reasons: list[RecommendationReason]


class RecommendationsResponse(CamelModel):
    recommendations: list[Recommendation]


class HealthResponse(CamelModel):
    status: str
    database: str
    redis: str
