"""API-specific request/response models."""
