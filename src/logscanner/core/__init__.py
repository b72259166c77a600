"""logscanner.core package."""
