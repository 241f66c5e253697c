"""Image loading, writing and batch result records."""
