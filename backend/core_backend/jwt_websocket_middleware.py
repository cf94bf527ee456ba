"""
JWT WebSocket Authentication Middleware for Django Channels.

Authenticates WebSocket connections with a simplejwt access token taken from
the ``token`` query parameter or the access token cookie, so terminals can
open the sync socket with the same credentials they use for the REST API.
"""
import logging
from urllib.parse import parse_qs

from channels.db import database_sync_to_async
from channels.middleware import BaseMiddleware
from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import AccessToken

logger = logging.getLogger(__name__)


def _token_from_scope(scope):
    query = parse_qs(scope.get("query_string", b"").decode("utf-8"))
    if query.get("token"):
        return query["token"][0]

    headers = dict(scope.get("headers", []))
    cookie_header = headers.get(b"cookie", b"").decode("utf-8")
    cookies = {}
    for cookie in cookie_header.split("; "):
        if "=" in cookie:
            key, value = cookie.split("=", 1)
            cookies[key] = value
    return cookies.get(settings.SIMPLE_JWT.get("AUTH_COOKIE", "access_token"))


@database_sync_to_async
def _get_active_user(user_id):
    User = get_user_model()
    try:
        return User.objects.get(pk=user_id, is_active=True)
    except User.DoesNotExist:
        logger.warning("User %s from JWT not found", user_id)
        return AnonymousUser()


class JWTAuthMiddleware(BaseMiddleware):
    """
    Puts the authenticated user (or AnonymousUser) into ``scope["user"]``.
    Connections that already carry a session user are left alone.
    """

    async def __call__(self, scope, receive, send):
        if scope["type"] != "websocket":
            return await super().__call__(scope, receive, send)

        user = scope.get("user")
        if user is None or not user.is_authenticated:
            scope["user"] = await self.get_user_from_jwt(scope)

        return await super().__call__(scope, receive, send)

    async def get_user_from_jwt(self, scope):
        raw_token = _token_from_scope(scope)
        if not raw_token:
            logger.debug("No JWT access token found in WebSocket connection")
            return AnonymousUser()

        try:
            token = AccessToken(raw_token)
        except TokenError as e:
            logger.warning("Invalid JWT token in WebSocket connection: %s", e)
            return AnonymousUser()

        user_id = token.get(settings.SIMPLE_JWT.get("USER_ID_CLAIM", "user_id"))
        if not user_id:
            logger.warning("JWT payload missing user_id")
            return AnonymousUser()

        user = await _get_active_user(user_id)
        if user.is_authenticated:
            logger.info("WebSocket authenticated: user=%s", user.username)
        return user
