"""CLI commands for termdeck."""
