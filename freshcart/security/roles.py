"""Role capabilities shared by every route that needs them"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..models.checkout import OrderStatus


class AppRole(str, Enum):
    BUYER = "buyer"
    SELLER = "seller"
    DELIVERY = "delivery"


class Capability(str, Enum):
    PLACE_ORDER = "place_order"
    VIEW_OWN_ORDERS = "view_own_orders"
    MANAGE_ORDERS = "manage_orders"
    MANAGE_PRODUCTS = "manage_products"
    ACCEPT_DELIVERY = "accept_delivery"
    UPDATE_DELIVERY = "update_delivery"


@dataclass
class Identity:
    """Authenticated user acting in a session"""
    user_id: str
    role: AppRole = AppRole.BUYER
    email: Optional[str] = None


ROLE_CAPABILITIES: dict[AppRole, frozenset[Capability]] = {
    AppRole.BUYER: frozenset({Capability.PLACE_ORDER, Capability.VIEW_OWN_ORDERS}),
    AppRole.SELLER: frozenset({Capability.MANAGE_ORDERS, Capability.MANAGE_PRODUCTS}),
    AppRole.DELIVERY: frozenset({Capability.ACCEPT_DELIVERY, Capability.UPDATE_DELIVERY}),
}

# Who may move an order into each status
STATUS_CAPABILITIES: dict[OrderStatus, Capability] = {
    OrderStatus.ACCEPTED: Capability.MANAGE_ORDERS,
    OrderStatus.PACKED: Capability.MANAGE_ORDERS,
    OrderStatus.CANCELLED: Capability.MANAGE_ORDERS,
    OrderStatus.ASSIGNED: Capability.ACCEPT_DELIVERY,
    OrderStatus.OUT_FOR_DELIVERY: Capability.UPDATE_DELIVERY,
    OrderStatus.DELIVERED: Capability.UPDATE_DELIVERY,
}

HOME_PATHS: dict[AppRole, str] = {
    AppRole.BUYER: "/",
    AppRole.SELLER: "/seller/dashboard",
    AppRole.DELIVERY: "/delivery",
}


def has_capability(identity: Optional[Identity], capability: Capability) -> bool:
    """Check whether an identity may perform an action"""
    if identity is None:
        return False
    return capability in ROLE_CAPABILITIES.get(identity.role, frozenset())


def can_set_status(identity: Optional[Identity], status: OrderStatus) -> bool:
    """Check whether an identity may move an order into a status"""
    capability = STATUS_CAPABILITIES.get(status)
    if capability is None:
        return False
    return has_capability(identity, capability)


def home_path_for(role: Optional[AppRole]) -> str:
    """Landing page for a role; unauthenticated users go to sign-in"""
    if role is None:
        return "/auth"
    return HOME_PATHS[role]
