"""ImmoGest - property management backend with an offline fallback store."""

__version__ = "1.0.0"
