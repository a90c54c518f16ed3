"""Auth category: request types and the provider adapter."""

from .adapter import AuthenticationProvider, AuthenticationProviderAdapter, AuthError, NotAuthorizedError
from .requests import (
    AuthSignInOptions,
    AuthSignInRequest,
    AuthSignInResult,
    AuthSignOutOptions,
    AuthSignOutRequest,
    AuthSignUpOptions,
    AuthSignUpRequest,
    AuthSignUpResult,
    CodeDeliveryDetails,
    WebUISignOutOptions,
)

__all__ = [
    "AuthError",
    "AuthSignInOptions",
    "AuthSignInRequest",
    "AuthSignInResult",
    "AuthSignOutOptions",
    "AuthSignOutRequest",
    "AuthSignUpOptions",
    "AuthSignUpRequest",
    "AuthSignUpResult",
    "AuthenticationProvider",
    "AuthenticationProviderAdapter",
    "CodeDeliveryDetails",
    "NotAuthorizedError",
    "WebUISignOutOptions",
]
