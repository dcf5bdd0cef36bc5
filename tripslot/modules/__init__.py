"""modules: scheduling engine, travel tools, validation and observability."""
