"""Pipeline services: transforms, mapping, validation, orchestration."""
