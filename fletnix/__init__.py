"""Fletnix - self-hosted media library server."""
