"""Services: git, workflow pipeline, state store, container helpers."""
