"""Schema Guard: schema inference and compatibility checks for uploaded CSV datasets."""
