"""Shared helpers that do not touch the native engine directly."""
