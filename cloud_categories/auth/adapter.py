"""Adapter translating auth category requests into calls on a native auth client."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol

from .requests import (
    AuthSignInRequest,
    AuthSignInResult,
    AuthSignOutRequest,
    AuthSignUpRequest,
    AuthSignUpResult,
    CodeDeliveryDetails,
    WebUISignOutOptions,
)

_LOGGER = logging.getLogger(__name__)

_SIGN_IN_STEPS = {
    "signedIn": "done",
    "smsMFA": "confirm_sign_in_with_sms_mfa_code",
    "customChallenge": "confirm_sign_in_with_custom_challenge",
    "newPasswordRequired": "confirm_sign_in_with_new_password",
}


class AuthError(RuntimeError):
    """Raised when the auth provider rejects a request or answers with malformed data."""

    def __init__(self, message: str, *, reason: str | None = None, recovery_suggestion: str | None = None) -> None:
        super().__init__(message)
        self.reason = reason
        self.recovery_suggestion = recovery_suggestion


class NotAuthorizedError(AuthError):
    """Raised when the current session or credentials are not accepted."""

    def __init__(self, message: str, *, recovery_suggestion: str | None = None) -> None:
        super().__init__(message, reason="not_authorized", recovery_suggestion=recovery_suggestion)


class AuthenticationProvider(Protocol):
    """The native identity client wrapped by the adapter."""

    async def async_sign_in(
        self, username: str | None, password: str | None, *, plugin_options: Any = None
    ) -> Mapping[str, Any] | None: ...

    async def async_sign_up(
        self, username: str, password: str | None, *, user_attributes: Mapping[str, str]
    ) -> Mapping[str, Any] | None: ...

    async def async_sign_out(self, *, global_sign_out: bool, invalidate_tokens: bool) -> None: ...

    async def async_sign_out_with_ui(self, presentation_anchor: Any, *, invalidate_tokens: bool) -> None: ...

    def sign_out_locally(self) -> None: ...


def _to_auth_error(err: Exception) -> AuthError:
    if isinstance(err, AuthError):
        return err
    return AuthError(str(err) or type(err).__name__, reason="unknown")


class AuthenticationProviderAdapter:
    """Auth category operations on top of an :class:`AuthenticationProvider`."""

    def __init__(self, provider: AuthenticationProvider) -> None:
        self._provider = provider

    async def async_sign_in(self, request: AuthSignInRequest) -> AuthSignInResult:
        try:
            payload = await self._provider.async_sign_in(
                request.username,
                request.password,
                plugin_options=request.options.plugin_options,
            )
        except Exception as err:
            raise _to_auth_error(err) from err
        if not isinstance(payload, Mapping):
            raise AuthError("sign in returned no result", reason="unknown")
        state = str(payload.get("signInState") or "")
        next_step = _SIGN_IN_STEPS.get(state)
        if next_step is None:
            raise AuthError(f"unsupported sign in state: {state or 'missing'}", reason="unknown")
        info = payload.get("parameters")
        return AuthSignInResult(next_step=next_step, additional_info=dict(info) if isinstance(info, Mapping) else {})

    async def async_sign_up(self, request: AuthSignUpRequest) -> AuthSignUpResult:
        try:
            payload = await self._provider.async_sign_up(
                request.username,
                request.password,
                user_attributes=dict(request.options.user_attributes),
            )
        except Exception as err:
            raise _to_auth_error(err) from err
        if not isinstance(payload, Mapping):
            raise AuthError("sign up returned no result", reason="unknown")
        state = payload.get("signUpState")
        if state == "confirmed":
            return AuthSignUpResult(next_step="done")
        if state == "unconfirmed":
            details = payload.get("codeDeliveryDetails")
            delivery = CodeDeliveryDetails.from_payload(details) if isinstance(details, Mapping) else None
            return AuthSignUpResult(next_step="confirm_user", code_delivery=delivery)
        raise AuthError(f"unsupported sign up state: {state!r}", reason="unknown")

    async def async_sign_out(self, request: AuthSignOutRequest) -> None:
        """Sign out, through the hosted web UI when its options are supplied.

        A provider answering ``not authorized`` (expired or revoked tokens)
        still leaves the user signed out locally and the call succeeds.
        """

        web_options = request.options.plugin_options
        try:
            if isinstance(web_options, WebUISignOutOptions):
                if web_options.sign_out_locally:
                    self._provider.sign_out_locally()
                    return
                await self._provider.async_sign_out_with_ui(web_options.presentation_anchor, invalidate_tokens=True)
            else:
                await self._provider.async_sign_out(
                    global_sign_out=request.options.global_sign_out,
                    invalidate_tokens=True,
                )
        except Exception as err:
            auth_error = _to_auth_error(err)
            if isinstance(auth_error, NotAuthorizedError):
                _LOGGER.debug("Sign out was not authorized; signing out locally: %s", auth_error)
                self._provider.sign_out_locally()
                return
            raise auth_error from err


__all__ = [
    "AuthError",
    "AuthenticationProvider",
    "AuthenticationProviderAdapter",
    "NotAuthorizedError",
]
