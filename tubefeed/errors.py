"""
errors.py — Failure kinds raised by the recommendation core.

The HTTP layer translates these into 401/403 responses; background work
logs them and moves on.
"""


class TubefeedError(Exception):
    # Base class for every failure the core raises on purpose.
    pass


class Unauthenticated(TubefeedError):
    # No usable credential on the request.
    pass


class Unverified(TubefeedError):
    # Identity resolved but not allow-listed (or no profile yet).
    pass


class NoIdentity(TubefeedError):
    # The identity lookup itself returned nothing.
    pass


class UpstreamUnavailable(TubefeedError):
    # Catalog API call failed, timed out, or ran out of retries.
    pass


class StoreWriteFailure(TubefeedError):
    # A (bulk) write to the document store did not complete.
    pass
