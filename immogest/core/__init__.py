"""Core configuration, errors, backend client and security."""
