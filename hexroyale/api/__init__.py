"""Inbound and outbound contracts of the simulation core."""
