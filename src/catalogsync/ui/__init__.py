"""User interfaces for catalogsync."""
