"""Shared utilities: logging and native library discovery."""
