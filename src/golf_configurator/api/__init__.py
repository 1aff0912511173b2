"""HTTP API for the configurator."""
