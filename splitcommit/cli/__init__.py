"""Command line interface for splitcommit."""
