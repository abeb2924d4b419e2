"""WebSocket transport and inbound message routing."""
