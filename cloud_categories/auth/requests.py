"""Request, option and result types of the auth category."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class AuthSignInOptions:
    # Provider specific extras for cases the common options do not cover
    plugin_options: Any = None


@dataclass(slots=True)
class AuthSignInRequest:
    username: str | None
    password: str | None
    options: AuthSignInOptions = field(default_factory=AuthSignInOptions)


@dataclass(slots=True)
class AuthSignUpOptions:
    user_attributes: dict[str, str] = field(default_factory=dict)
    plugin_options: Any = None


@dataclass(slots=True)
class AuthSignUpRequest:
    username: str
    password: str | None
    options: AuthSignUpOptions = field(default_factory=AuthSignUpOptions)


@dataclass(slots=True)
class AuthSignOutOptions:
    global_sign_out: bool = False
    plugin_options: Any = None


@dataclass(slots=True)
class AuthSignOutRequest:
    options: AuthSignOutOptions = field(default_factory=AuthSignOutOptions)


@dataclass(frozen=True, slots=True)
class WebUISignOutOptions:
    """Sign out through the hosted web UI presented on ``presentation_anchor``.

    With ``sign_out_locally`` the user is only removed from local credential
    storage and the browser session is left untouched.
    """

    presentation_anchor: Any
    sign_out_locally: bool = False


@dataclass(frozen=True, slots=True)
class CodeDeliveryDetails:
    destination: str | None
    delivery_medium: str | None = None
    attribute_name: str | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> CodeDeliveryDetails:
        destination = payload.get("destination")
        medium = payload.get("deliveryMedium") or payload.get("delivery_medium")
        attribute = payload.get("attributeName") or payload.get("attribute_name")
        return cls(
            destination=str(destination) if destination else None,
            delivery_medium=str(medium).lower() if medium else None,
            attribute_name=str(attribute) if attribute else None,
        )


@dataclass(frozen=True, slots=True)
class AuthSignUpResult:
    next_step: str
    code_delivery: CodeDeliveryDetails | None = None

    @property
    def is_sign_up_complete(self) -> bool:
        return self.next_step == "done"


@dataclass(frozen=True, slots=True)
class AuthSignInResult:
    next_step: str
    additional_info: dict[str, Any] = field(default_factory=dict)

    @property
    def is_signed_in(self) -> bool:
        return self.next_step == "done"


__all__ = [
    "AuthSignInOptions",
    "AuthSignInRequest",
    "AuthSignInResult",
    "AuthSignOutOptions",
    "AuthSignOutRequest",
    "AuthSignUpOptions",
    "AuthSignUpRequest",
    "AuthSignUpResult",
    "CodeDeliveryDetails",
    "WebUISignOutOptions",
]
