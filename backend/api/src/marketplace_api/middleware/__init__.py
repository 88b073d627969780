"""ASGI middleware for the marketplace API."""
