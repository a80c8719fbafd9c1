"""Query and graph pattern generators."""
