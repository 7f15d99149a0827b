"""Rate limiting configuration using slowapi."""

import os

from slowapi import Limiter
from slowapi.util import get_remote_address

# Disable rate limiting during tests
_testing = os.environ.get("TESTING", "").lower() in ("1", "true", "yes")

# Create limiter instance - uses client IP by default
limiter = Limiter(key_func=get_remote_address, enabled=not _testing)

# Rate limit constants. Streaming endpoints are not limited: players issue
# many Range requests while seeking.
RATE_LIMIT_READ = "200/minute"  # Catalog reads
RATE_LIMIT_SCAN = "10/minute"  # Library scans walk the filesystem
