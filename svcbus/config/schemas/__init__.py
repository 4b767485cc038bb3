"""Per-section configuration schemas."""
