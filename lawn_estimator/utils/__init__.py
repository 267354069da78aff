"""Shared helpers used across providers, geocoders, and orchestrators."""
