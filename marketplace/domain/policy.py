# marketplace/domain/policy.py
"""
Polityka dostepu: (akcja, wlasnosc zasobu, rola wywolujacego) -> allow/deny.
Czysta funkcja, bez zaleznosci od HTTP ani bazy.
"""
from dataclasses import dataclass
from enum import Enum

from marketplace.domain.errors import AuthorizationError


class Role(str, Enum):
    ADMIN = "admin"
    PROVIDER = "provider"
    CUSTOMER = "customer"
    PRODUCTION = "production"


@dataclass(frozen=True)
class Identity:
    user_id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass(frozen=True)
class Ownership:
    customer_id: int | None = None
    provider_id: int | None = None


class Action(str, Enum):
    ORDER_CREATE = "order:create"
    ORDER_READ = "order:read"
    ORDER_UPDATE_STATUS = "order:update_status"
    ORDER_UPDATE_PRINTED = "order:update_printed"
    ORDER_FILTER_BY_OWNER = "order:filter_by_owner"
    LISTING_CREATE = "listing:create"
    LISTING_READ = "listing:read"
    LISTING_UPDATE = "listing:update"
    LISTING_MODERATE = "listing:moderate"
    SET_CREATE = "set:create"
    SETTINGS_READ_ALL = "settings:read_all"
    SETTINGS_WRITE = "settings:write"


def _owns_as_customer(identity: Identity, ownership: Ownership) -> bool:
    return ownership.customer_id is not None and ownership.customer_id == identity.user_id


def _owns_as_provider(identity: Identity, ownership: Ownership) -> bool:
    return ownership.provider_id is not None and ownership.provider_id == identity.user_id


def is_allowed(action: Action, identity: Identity, ownership: Ownership | None = None) -> bool:
    ownership = ownership or Ownership()
    role = identity.role

    if action == Action.ORDER_CREATE:
        return role == Role.CUSTOMER

    if action == Action.ORDER_READ:
        if role in (Role.ADMIN, Role.PRODUCTION):
            return True
        if role == Role.CUSTOMER:
            return _owns_as_customer(identity, ownership)
        if role == Role.PROVIDER:
            return _owns_as_provider(identity, ownership)
        return False

    if action == Action.ORDER_UPDATE_STATUS:
        return role == Role.ADMIN or (role == Role.PROVIDER and _owns_as_provider(identity, ownership))

    if action == Action.ORDER_UPDATE_PRINTED:
        return role in (Role.ADMIN, Role.PRODUCTION)

    if action in (Action.ORDER_FILTER_BY_OWNER, Action.LISTING_MODERATE, Action.SET_CREATE,
                  Action.SETTINGS_READ_ALL, Action.SETTINGS_WRITE):
        return role == Role.ADMIN

    if action == Action.LISTING_CREATE:
        return role in (Role.ADMIN, Role.PROVIDER)

    if action in (Action.LISTING_READ, Action.LISTING_UPDATE):
        return role == Role.ADMIN or _owns_as_provider(identity, ownership)

    return False


def ensure_allowed(
    action: Action,
    identity: Identity,
    ownership: Ownership | None = None,
    message: str | None = None,
) -> None:
    if not is_allowed(action, identity, ownership):
        raise AuthorizationError(message or f"Access denied for {action.value}")
