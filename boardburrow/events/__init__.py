"""Event types and the emitter observers subscribe to."""
