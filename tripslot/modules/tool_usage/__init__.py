"""modules/tool_usage: travel-time estimation and its caches."""
