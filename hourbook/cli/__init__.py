"""Hourbook command line."""
