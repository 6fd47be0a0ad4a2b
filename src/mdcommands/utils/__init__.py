"""Utility modules for mdcommands."""
