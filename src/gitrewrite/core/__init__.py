"""Configuration, logging, errors and process execution."""
