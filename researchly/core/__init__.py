"""Domain core: exception taxonomy and result types."""
