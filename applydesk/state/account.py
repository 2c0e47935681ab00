"""Sign-in, sign-up, sign-out and password flows."""

from __future__ import annotations

import logging
from typing import Optional

from applydesk.errors import ValidationError
from applydesk.models import Identity, Session
from applydesk.services.auth_service import AuthService

logger = logging.getLogger(__name__)


def _check_confirmation(password: str, confirmation: Optional[str]) -> None:
    if confirmation is not None and password != confirmation:
        raise ValidationError("Passwords do not match.", reason="password_mismatch")


class AccountActions:
    """Thin layer over the backend auth API.

    Session state is never touched here; the Session Store learns about
    every change through the backend's notification channel.
    """

    def __init__(self, auth: AuthService, password_reset_redirect: str) -> None:
        self._auth = auth
        self._password_reset_redirect = password_reset_redirect

    async def sign_in(self, email: str, password: str) -> Session:
        return await self._auth.sign_in(email, password)

    async def sign_up(self, email: str, password: str, confirmation: Optional[str] = None) -> Identity:
        _check_confirmation(password, confirmation)
        return await self._auth.sign_up(email, password)

    async def sign_out(self) -> None:
        await self._auth.sign_out()

    async def request_password_reset(self, email: str) -> None:
        if not (email or "").strip():
            raise ValidationError("Email is required.", reason="missing_email")
        await self._auth.request_password_reset(email, self._password_reset_redirect)

    async def update_password(self, new_password: str, confirmation: Optional[str]) -> None:
        _check_confirmation(new_password, confirmation)
        await self._auth.update_password(new_password)
        logger.info("Password updated")
