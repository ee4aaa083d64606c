"""HTTP service for fireweather streams."""
