"""Command line interface for termdeck."""
