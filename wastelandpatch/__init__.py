"""Binary patch creation and conversion, suffix sorting, MD5 helpers and installer prompts."""

__version__ = "0.1.0"

__all__ = ["makediff", "program", "prompts", "sais", "util"]