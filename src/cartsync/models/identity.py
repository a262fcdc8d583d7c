"""Identity state consumed from the authentication layer."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Anonymous:
    """No authenticated identity; the offline cart is authoritative."""


@dataclass(frozen=True, slots=True)
class Authenticated:
    """An authenticated identity; its identity-scoped cart is authoritative."""

    identity_id: str

    def __post_init__(self) -> None:
        if not self.identity_id.strip():
            raise ValueError("identity_id must be non-empty")


IdentityState = Anonymous | Authenticated

ANONYMOUS = Anonymous()


def is_sign_in(previous: IdentityState | None, current: IdentityState) -> bool:
    """Return ``True`` only for an ``Anonymous -> Authenticated`` transition."""
    return isinstance(previous, Anonymous) and isinstance(current, Authenticated)
