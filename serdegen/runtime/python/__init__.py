"""Python runtime library installed next to generated modules."""
