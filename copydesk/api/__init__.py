"""HTTP API for Copydesk."""
