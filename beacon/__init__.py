"""
Beacon - Discord MCP tool server for game-server communities.

Exposes Discord moderation, role, permission, thread, voice, embed and
log-analysis operations as Model Context Protocol tools.
"""

__version__ = "0.1.0"
