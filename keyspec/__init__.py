"""keyspec: canonical key templates for AEAD keys."""

__version__ = "1.0.0"
