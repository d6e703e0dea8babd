# LoopBack Bluemix Helper
# File: transports/__init__.py
# Version: v1

"""MCP transports for the LoopBack Bluemix helper."""
