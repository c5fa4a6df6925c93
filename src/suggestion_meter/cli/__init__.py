"""Command-line host for the capture pipeline."""
