"""
Anti-CSRF state management for the redirect round trip.

The state is a random token embedded in the authorization URL and stored in
an encrypted cookie. On callback the provider echoes it back as a query
parameter and the two values must match byte for byte.
"""

import hmac
import logging
from typing import Optional

from authlib.common.security import generate_token

from ally.core.exceptions import ProviderNotConfiguredError
from ally.core.ports import HttpContext
from ally.infrastructure.encryption import EncryptionError, decrypt_value, encrypt_value


logger = logging.getLogger(__name__)

STATE_TOKEN_LENGTH = 32


class StateManager:
    """
    Generates, stores and verifies the state for one request context.

    The inbound cookie is read and decrypted on the first verification, not
    at construction, so stateless flows never touch it. It is consumed (and
    the cookie cleared) the first time the state is verified.
    """

    def __init__(
        self, cookie_name: str, param_name: str, ctx: HttpContext, max_age: int
    ):
        self.cookie_name = cookie_name
        self.param_name = param_name
        self.max_age = max_age
        self._ctx = ctx
        self._cookie_value: Optional[str] = None
        self._consumed = False

    def _read_cookie(self) -> Optional[str]:
        raw = self._ctx.get_cookie(self.cookie_name)
        if not raw:
            return None

        try:
            return decrypt_value(raw, ttl=self.max_age)
        except EncryptionError:
            # Tampered or expired cookies behave like missing ones
            logger.warning(
                "Discarding unreadable state cookie",
                extra={"cookie_name": self.cookie_name},
            )
            return None
        except ValueError as e:
            raise ProviderNotConfiguredError(str(e)) from e

    def set_state(self) -> str:
        """
        Generate a fresh state and persist it in the state cookie.

        Returns:
            The plain state value to embed in the redirect URL

        Raises:
            ProviderNotConfiguredError: If the cookie key is missing or invalid
        """
        state = generate_token(STATE_TOKEN_LENGTH)
        try:
            value = encrypt_value(state)
        except ValueError as e:
            raise ProviderNotConfiguredError(str(e)) from e

        self._ctx.set_cookie(self.cookie_name, value, self.max_age)
        return state

    def state_mismatch(self) -> bool:
        """
        Check the callback state against the stored one.

        Returns True when they differ or either is absent. This happens when
        cookies are not supported, the cookie expired, or the cookie was not
        sent back because of a URL mismatch.
        """
        if not self._consumed:
            self._consumed = True
            if self._ctx.get_cookie(self.cookie_name):
                self._ctx.clear_cookie(self.cookie_name)
            self._cookie_value = self._read_cookie()

        state = self._ctx.input(self.param_name)
        if not state or not self._cookie_value:
            return True

        return not hmac.compare_digest(state.encode(), self._cookie_value.encode())
