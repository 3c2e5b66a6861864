"""External collaborators (metadata engines)."""
