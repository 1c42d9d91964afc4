"""Adapters – concrete transports behind the application ports."""
