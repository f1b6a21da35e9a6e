"""Command resolution, validation and composite layout engine."""
