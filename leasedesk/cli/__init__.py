"""Command line tools for LeaseDesk."""
