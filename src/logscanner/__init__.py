"""logscanner package."""
