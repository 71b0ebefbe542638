"""Configuration, errors, store client and observability."""
