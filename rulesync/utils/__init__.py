"""Utility helpers: console output, file operations and settings."""
