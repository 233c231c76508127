"""Package data: bundled schemas."""
