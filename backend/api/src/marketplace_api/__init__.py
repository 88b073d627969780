"""HTTP API for the marketplace reservation engine."""
