"""Adapters connecting the catalog domain to storage and seed files."""
