"""Adapters from external data files to the dialogue core model."""
