"""Rental lifecycle: booking, pick-up, return and reminder intents."""
