# marketplace/api/deps.py
from fastapi import Depends, Header, Query, Request

from marketplace.domain.errors import AuthenticationError
from marketplace.domain.policy import Identity
from marketplace.services.identity_service import IdentityResolver
from marketplace.services.settings_cache import SettingsCache
from marketplace.utils.pagination import Page, parse_pagination


def get_identity_resolver(request: Request) -> IdentityResolver:
    return request.app.state.identity_resolver


def get_settings_cache(request: Request) -> SettingsCache:
    return request.app.state.settings_cache


def get_current_identity(
    authorization: str | None = Header(None),
    resolver: IdentityResolver = Depends(get_identity_resolver),
) -> Identity:
    return resolver.resolve(authorization)


def get_optional_identity(
    authorization: str | None = Header(None),
    resolver: IdentityResolver = Depends(get_identity_resolver),
) -> Identity | None:
    #endpointy publiczne, zly token traktowany jak brak tokenu
    if not authorization:
        return None
    try:
        return resolver.resolve(authorization)
    except AuthenticationError:
        return None


def get_page(
    page: int | None = Query(None),
    limit: int | None = Query(None),
) -> Page:
    return parse_pagination(page, limit)
