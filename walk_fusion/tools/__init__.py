"""Command line helpers for working with recorded sessions."""
