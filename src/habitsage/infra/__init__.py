"""Infrastructure: database bootstrap and repository implementations."""
