"""HTTP surface: versioned REST API and the public short-link route."""
