"""Endpoint modules for the thermostat HTTP API."""
