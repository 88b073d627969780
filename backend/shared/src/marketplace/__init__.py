"""Shared domain library for the marketplace reservation engine."""
