"""Caller identity and ownership checks.

The API layer turns the ``Authorization`` header (or, for public reads, the
``X-Seller-ID`` header) into an :class:`Actor`. Services only ever ask two
questions of it: may this actor read the product, and may it mutate it.
"""
from datetime import datetime, timedelta, timezone
from functools import wraps
from flask import current_app, g, request
from jose import JWTError, jwt
from catalog.errors import Forbidden, Unauthorized, ValidationFailed

GUEST = "guest"
CUSTOMER = "customer"
SELLER = "seller"
ADMIN = "admin"

ROLES = {GUEST, CUSTOMER, SELLER, ADMIN}

SELLER_ID_HEADER = "X-Seller-ID"
BEARER_PREFIX = "Bearer"

# Token roleName → actor role
_TOKEN_ROLES = {"ADMIN": ADMIN, "SELLER": SELLER, "CUSTOMER": CUSTOMER}


class Actor:
    """Who is calling: a role, an optional seller id and a seller hint for guests."""

    def __init__(self, role=GUEST, seller_id=None, user_id=None, seller_hint=None):
        if role not in ROLES:
            raise ValueError(f"Unknown role: {role}")
        self.role = role
        self.seller_id = seller_id
        self.user_id = user_id
        self.seller_hint = seller_hint

    @property
    def is_authenticated(self):
        return self.role != GUEST

    @property
    def is_admin(self):
        return self.role == ADMIN

    def __repr__(self):
        return f"<Actor {self.role} seller={self.seller_id}>"


def can_read(actor, product):
    if actor.role in (ADMIN, CUSTOMER, SELLER):
        return True
    return actor.seller_hint is not None and actor.seller_hint == product.seller_id


def can_mutate(actor, product):
    if actor.role == ADMIN:
        return True
    if actor.role == SELLER:
        return actor.seller_id is not None and actor.seller_id == product.seller_id
    return False


def ensure_can_read(actor, product):
    if not can_read(actor, product):
        raise Forbidden("You don't have access to this product")


def ensure_can_mutate(actor, product):
    if can_mutate(actor, product):
        return
    if not actor.is_authenticated:
        raise Unauthorized()
    raise Forbidden()


# --- Tokens ---


def issue_token(role, seller_id=None, user_id=None, expires_in=None):
    """Sign an access token for the given role (ADMIN, SELLER, CUSTOMER)."""
    if expires_in is None:
        expires_in = timedelta(hours=current_app.config["JWT_EXPIRY_HOURS"])
    claims = {
        "userId": user_id,
        "roleName": role.upper(),
        "exp": datetime.now(timezone.utc) + expires_in,
    }
    if seller_id is not None:
        claims["sellerId"] = seller_id
    return jwt.encode(
        claims,
        current_app.config["JWT_SECRET"],
        algorithm=current_app.config["JWT_ALGORITHM"],
    )


def _claim_seller_id(raw):
    """Seller ids compare against integer columns; "7" and 7 are the same seller."""
    if raw is None:
        return None
    if isinstance(raw, bool):
        raise Unauthorized("Invalid seller information", code="INVALID_SELLER")
    try:
        seller_id = int(str(raw).strip())
    except ValueError:
        raise Unauthorized("Invalid seller information", code="INVALID_SELLER")
    if seller_id <= 0:
        raise Unauthorized("Invalid seller information", code="INVALID_SELLER")
    return seller_id


def decode_token(token):
    """Verify a token and build the actor it names. Raises Unauthorized."""
    try:
        claims = jwt.decode(
            token,
            current_app.config["JWT_SECRET"],
            algorithms=[current_app.config["JWT_ALGORITHM"]],
        )
    except JWTError:
        raise Unauthorized("invalid token", code="TOKEN_INVALID")

    role = _TOKEN_ROLES.get(str(claims.get("roleName", "")).upper())
    if role is None:
        raise Unauthorized("User Role not found", code="ROLE_NOT_FOUND")
    seller_id = _claim_seller_id(claims.get("sellerId"))
    if role == SELLER and seller_id is None:
        raise Unauthorized("Invalid seller information", code="INVALID_SELLER")
    return Actor(role=role, seller_id=seller_id, user_id=claims.get("userId"))


def actor_from_request(require_seller_hint=False):
    """Resolve the calling actor from the current request headers."""
    header = request.headers.get("Authorization", "")
    if header:
        parts = header.split(" ", 1)
        if len(parts) != 2 or parts[0] != BEARER_PREFIX or not parts[1].strip():
            raise Unauthorized("Invalid authorization format", code="INVALID_AUTH_FORMAT")
        return decode_token(parts[1].strip())

    raw_hint = request.headers.get(SELLER_ID_HEADER, "").strip()
    if not raw_hint:
        if require_seller_hint:
            raise ValidationFailed(
                "Seller ID is required in X-Seller-ID header", code="SELLER_ID_REQUIRED"
            )
        return Actor()
    if not raw_hint.isdigit() or int(raw_hint) == 0:
        raise ValidationFailed("Invalid seller ID provided", code="SELLER_ID_INVALID")
    return Actor(seller_hint=int(raw_hint))


# --- View decorators ---


def seller_or_admin_required(view):
    """Require a seller or admin token; ownership is checked by the service."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        actor = actor_from_request()
        if not actor.is_authenticated:
            raise Unauthorized()
        if actor.role not in (SELLER, ADMIN):
            raise Forbidden("Seller or Admin access required")
        g.actor = actor
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        actor = actor_from_request()
        if not actor.is_authenticated:
            raise Unauthorized()
        if not actor.is_admin:
            raise Forbidden("Admin access required")
        g.actor = actor
        return view(*args, **kwargs)

    return wrapper


def public_api(view):
    """Allow anonymous reads that name a seller in X-Seller-ID."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        g.actor = actor_from_request(require_seller_hint=True)
        return view(*args, **kwargs)

    return wrapper
