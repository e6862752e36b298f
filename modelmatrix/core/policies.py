# modelmatrix/core/policies.py
from typing import Any, Callable

from fastapi import Depends, Request

from modelmatrix.core.auth import Identity, require_auth
from modelmatrix.core.errors import Forbidden

# (identity, resource) -> allow?
Policy = Callable[[Identity, Any], bool]


def is_admin(identity: Identity, resource: Any = None) -> bool:
    return identity.is_admin


def is_self(identity: Identity, email: str | None) -> bool:
    """Target email must be the caller's; no target means the caller."""
    if email is None:
        return True
    return email.strip().lower() == identity.email


def owns(field_name: str) -> Policy:
    """Allow when `resource.<field_name>` is the caller's email."""

    def policy(identity: Identity, resource: Any) -> bool:
        return getattr(resource, field_name, None) == identity.email

    policy.__name__ = f"owns_{field_name}"
    return policy


def any_of(*policies: Policy) -> Policy:
    def policy(identity: Identity, resource: Any) -> bool:
        return any(p(identity, resource) for p in policies)

    return policy


def authorize(policy: Policy, identity: Identity, resource: Any = None) -> None:
    """
    Raises:
        Forbidden(403): if the policy denies.
    """
    if not policy(identity, resource):
        raise Forbidden()


def require_policy(policy: Policy, param: str | None = None):
    """
    Dependency factory: gate + policy check on a request parameter.

    The resource handed to the policy is the path param `param`, falling
    back to the query param of the same name (None if absent).

        @router.get("/{email}")
        def read(identity: Identity = Depends(require_policy(SELF_ONLY, "email"))):
            ...
    """

    def dependency(
        request: Request,
        identity: Identity = Depends(require_auth),
    ) -> Identity:
        resource = None
        if param is not None:
            resource = request.path_params.get(param, request.query_params.get(param))
        authorize(policy, identity, resource)
        return identity

    return dependency


SELF_ONLY = is_self
ADMIN_ONLY = is_admin
SELF_OR_ADMIN = any_of(is_self, is_admin)
MODEL_MAINTAINER = any_of(owns("created_by"), is_admin)

require_admin = require_policy(ADMIN_ONLY)
