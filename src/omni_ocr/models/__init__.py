"""Configuration, options and result models."""
