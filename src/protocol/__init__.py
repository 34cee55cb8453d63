"""MCP protocol servers for the Multi-Backend Database Gateway."""
