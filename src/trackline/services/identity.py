"""Operator identity."""

import secrets
from typing import Optional, Protocol

from trackline.core.logger import log_info, log_warning


class IdentityProvider(Protocol):
    """Authenticated-identity capability."""

    def current_operator(self) -> Optional[str]:
        """Current operator id, or None when nobody is signed in."""
        ...


class OperatorIdentity:
    """Single operator signed in with a shared token."""

    def __init__(self, operator_id: str, token: Optional[str] = None):
        """
        Args:
            operator_id: Id recorded as tracker id
            token: Shared secret for sign-in (None = sign-in disabled)
        """
        self.operator_id = operator_id
        self._token = token
        self._signed_in = False

    def current_operator(self) -> Optional[str]:
        return self.operator_id if self._signed_in else None

    def sign_in(self, token: str) -> bool:
        """Signs the operator in when the token matches."""
        if not self._token or not secrets.compare_digest(token.encode(), self._token.encode()):
            log_warning("operator sign-in rejected")
            return False
        self._signed_in = True
        log_info(f"operator {self.operator_id} signed in")
        return True

    def sign_out(self) -> None:
        self._signed_in = False
        log_info(f"operator {self.operator_id} signed out")
