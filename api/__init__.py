"""HTTP API for the shoe counter."""
