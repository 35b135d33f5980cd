"""Wire payloads exchanged over the message interface."""
