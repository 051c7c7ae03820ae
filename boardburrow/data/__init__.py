"""Models, seed catalog and key-value persistence."""
