"""
gate.py — Verification gate in front of every ledger-touching operation.
"""

from . import config
from .errors import NoIdentity, Unverified

def require_verified(store, user_id):
    # Return user_id if the profile exists and is verified, else raise.
    if not user_id:
        raise NoIdentity("identity lookup returned nothing")
    profile = store.get_profile(user_id)
    if profile is None or profile.authenticated is not True:
        raise Unverified(f"{user_id} is not verified")
    return user_id

def verify(store, user_id, allowed=None):
    # Mark an allow-listed channel as verified; anyone else stays out.
    if not user_id:
        raise NoIdentity("identity lookup returned nothing")
    allowed = config.ALLOWED_CHANNELS if allowed is None else allowed
    if user_id not in allowed:
        raise Unverified(f"{user_id} is not on the allow-list")
    store.set_authenticated(user_id, True)
    return user_id
