"""Command-line interface for codersdb."""
