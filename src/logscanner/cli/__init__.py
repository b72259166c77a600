"""logscanner.cli package."""
