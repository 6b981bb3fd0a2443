"""Source resolution and instrument view decomposition."""
