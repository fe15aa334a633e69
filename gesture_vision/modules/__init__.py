"""Pipeline stage implementations."""
