"""Shared test configuration."""

import os

# Must be set before fletnix.rate_limit and fletnix.main are imported
os.environ.setdefault("TESTING", "1")
os.environ.setdefault("ACCESS_LOG_DESTINATION", "none")
