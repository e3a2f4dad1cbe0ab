"""Document naming, storage and audit services."""
