"""Command-line interface for Market Scout."""
