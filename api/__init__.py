"""HTTP surface for the poultry inventory engine."""
