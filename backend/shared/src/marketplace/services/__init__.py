"""Business logic services for the manual reservation engine."""
