"""
MUD terminal client.

Turns typed player input into server-bound game actions and keeps a player
session alive over a WebSocket connection that may need to fall back from a
secure to an insecure transport.
"""

__version__ = "0.1.0"
