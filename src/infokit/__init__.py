"""Infographic editor SDK — document model, geometry, batch table and persistence."""
