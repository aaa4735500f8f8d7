# === NAVMAP v1 ===
# {
#   "module": "RestKit.network.policy",
#   "purpose": "HTTP policy constants: timeouts, pooling, default headers.",
#   "sections": []
# }
# === /NAVMAP ===

"""HTTP policy constants and defaults.

Timeout budgets and connection-pool parameters for the default
:class:`httpx.Client` transport built by :mod:`RestKit.network.client`.
Callers that need different values pass their own client through
``with_http_client``.
"""

# ============================================================================
# Timeouts (seconds)
# ============================================================================

HTTP_CONNECT_TIMEOUT = 10.0

HTTP_READ_TIMEOUT = 30.0

HTTP_WRITE_TIMEOUT = 30.0

HTTP_POOL_TIMEOUT = 5.0

# ============================================================================
# Connection pooling
# ============================================================================

MAX_CONNECTIONS = 100

MAX_KEEPALIVE_CONNECTIONS = 20

KEEPALIVE_EXPIRY = 5.0

# ============================================================================
# Headers
# ============================================================================

USER_AGENT = "restkit/0.1"

SUCCESS_STATUS_RANGE = range(200, 300)

__all__ = [
    "HTTP_CONNECT_TIMEOUT",
    "HTTP_READ_TIMEOUT",
    "HTTP_WRITE_TIMEOUT",
    "HTTP_POOL_TIMEOUT",
    "MAX_CONNECTIONS",
    "MAX_KEEPALIVE_CONNECTIONS",
    "KEEPALIVE_EXPIRY",
    "USER_AGENT",
    "SUCCESS_STATUS_RANGE",
]
