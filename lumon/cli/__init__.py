"""Command line sub-applications."""
