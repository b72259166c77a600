"""logscanner.mcp package."""
