"""Command-line interface for operating the notification pipeline."""
