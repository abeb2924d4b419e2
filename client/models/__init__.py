"""Data models shared across the client: commands and server envelopes."""
