"""Shared plumbing: logging, configuration and errors."""
