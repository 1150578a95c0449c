"""Sheet readers, the raw cell grid and table structure detection."""
