"""HTTP surface for the health insights engine."""
