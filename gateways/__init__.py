"""Clients for the remote systems the adapters read from."""
