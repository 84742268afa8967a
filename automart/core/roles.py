# automart/core/roles.py
from enum import Enum
from typing import Dict, FrozenSet


class UserRole(str, Enum):
    GUEST = "guest"
    BUYER = "buyer"
    SELLER = "seller"
    ADMIN = "admin"


# roles a user row may carry; GUEST only exists for anonymous requesters
STORED_ROLES = (UserRole.BUYER, UserRole.SELLER, UserRole.ADMIN)


class Capability(str, Enum):
    BROWSE = "browse"
    SAVE_FAVORITES = "save_favorites"
    SEND_MESSAGES = "send_messages"
    MANAGE_SHOWROOM = "manage_showroom"
    MANAGE_LISTINGS = "manage_listings"
    MANAGE_SUBSCRIPTION = "manage_subscription"
    MANAGE_USERS = "manage_users"
    MANAGE_ALL_LISTINGS = "manage_all_listings"


ROLE_CAPABILITIES: Dict[UserRole, FrozenSet[Capability]] = {
    UserRole.GUEST: frozenset({Capability.BROWSE}),
    UserRole.BUYER: frozenset({
        Capability.BROWSE,
        Capability.SAVE_FAVORITES,
        Capability.SEND_MESSAGES,
    }),
    UserRole.SELLER: frozenset({
        Capability.BROWSE,
        Capability.SEND_MESSAGES,
        Capability.MANAGE_SHOWROOM,
        Capability.MANAGE_LISTINGS,
        Capability.MANAGE_SUBSCRIPTION,
    }),
    UserRole.ADMIN: frozenset(Capability),
}

# where the client lands after login
ROLE_HOME: Dict[UserRole, str] = {
    UserRole.GUEST: "/",
    UserRole.BUYER: "/buyer/saved-cars",
    UserRole.SELLER: "/seller/dashboard",
    UserRole.ADMIN: "/admin/dashboard",
}


def capabilities_for(role: UserRole) -> FrozenSet[Capability]:
    return ROLE_CAPABILITIES.get(UserRole(role), ROLE_CAPABILITIES[UserRole.GUEST])


def has_capability(role: UserRole, capability: Capability) -> bool:
    return capability in capabilities_for(role)


def home_path(role: UserRole) -> str:
    return ROLE_HOME.get(UserRole(role), "/")
