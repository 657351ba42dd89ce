"""Pending-suggestion analysis and clustering service."""
