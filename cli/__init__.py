"""Command-line interface for Rental Scout."""
