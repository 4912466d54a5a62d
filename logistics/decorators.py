"""
Authorization policy and route-level access control.

Every protected route names the permission it needs; an
``AccessPolicy`` decides which roles hold that permission. Swapping the
policy (``ACCESS_POLICY`` in config) changes who may do what without
touching any route:

    @bp.route('/services')
    @permission_required('parcel.view')
    def services():
        ...

Roles are ``anonymous`` (nobody signed in), ``worker`` and ``admin``.
"""

import logging
from dataclasses import dataclass, field
from functools import wraps

from flask import current_app, flash, redirect, request, url_for
from flask_login import current_user

from logistics.extensions import login_manager

logger = logging.getLogger(__name__)

ANONYMOUS = "anonymous"
WORKER = "worker"
ADMIN = "admin"

EVERYONE = frozenset({ANONYMOUS, WORKER, ADMIN})
STAFF = frozenset({WORKER, ADMIN})
ADMINS = frozenset({ADMIN})


@dataclass(frozen=True)
class AccessPolicy:
    """
    Mapping of permission name -> roles allowed to use it.

    Permissions missing from ``grants`` are denied to everyone.
    """

    name: str
    grants: dict[str, frozenset[str]] = field(default_factory=dict)

    def allows(self, role: str, permission: str) -> bool:
        return role in self.grants.get(permission, frozenset())

    def with_grants(self, name: str, **overrides: frozenset[str]) -> "AccessPolicy":
        """Return a copy with some permissions re-assigned.

        Dots in permission names are written as double underscores in
        ``overrides`` (``parcel__view`` -> ``parcel.view``).
        """
        grants = dict(self.grants)
        for key, roles in overrides.items():
            grants[key.replace("__", ".")] = frozenset(roles)
        return AccessPolicy(name=name, grants=grants)


STANDARD_POLICY = AccessPolicy(
    name="standard",
    grants={
        # Customer-facing lookups.
        "parcel.track": EVERYONE,
        # Staff parcel handling.
        "parcel.view": STAFF,
        "parcel.create": STAFF,
        "parcel.update": STAFF,
        "parcel.delete": STAFF,
        # Account administration.
        "account.manage": ADMINS,
        "account.register_admin": ADMINS,
        "account.reset_password": ADMINS,
    },
)

# Same as standard, but only admins may delete parcels and the public
# tracking pages require a signed-in user.
STRICT_POLICY = STANDARD_POLICY.with_grants(
    "strict",
    parcel__track=STAFF,
    parcel__delete=ADMINS,
)

POLICIES: dict[str, AccessPolicy] = {
    STANDARD_POLICY.name: STANDARD_POLICY,
    STRICT_POLICY.name: STRICT_POLICY,
}


def get_policy() -> AccessPolicy:
    """Return the policy selected by the ``ACCESS_POLICY`` config key."""
    configured = current_app.config.get("ACCESS_POLICY", STANDARD_POLICY.name)
    if isinstance(configured, AccessPolicy):
        return configured
    try:
        return POLICIES[configured]
    except KeyError:
        raise RuntimeError(
            f"Unknown ACCESS_POLICY '{configured}'. "
            f"Valid options: {list(POLICIES)}"
        ) from None


def current_role() -> str:
    """Role of the signed-in principal, or ``anonymous``."""
    if not current_user.is_authenticated:
        return ANONYMOUS
    return current_user.principal_role


def can(permission: str) -> bool:
    """Template/route helper: may the current user use ``permission``?"""
    return get_policy().allows(current_role(), permission)


def permission_required(permission: str):
    """
    Decorator that restricts a route to roles holding ``permission``.

    Anonymous users are sent to the sign-in page; signed-in users
    without the permission get a flashed message and go home.

    Args:
        permission: Dotted permission name (e.g., 'parcel.update').
    """

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if can(permission):
                return func(*args, **kwargs)

            if not current_user.is_authenticated:
                return login_manager.unauthorized()

            logger.warning(
                "Access denied: %s %s (%s) attempted %s %s (requires %s)",
                current_role(),
                current_user.id,
                current_user.email,
                request.method,
                request.path,
                permission,
            )
            flash("You do not have permission to perform this action.", "danger")
            return redirect(url_for("main.index"))

        return wrapper

    return decorator
