"""Document fetching, structure discovery and record extraction."""
