"""
BoardBurrow board-game rental engine.

The package holds the rental domain (pricing, rental lifecycle, onboarding
stages), its persistence adapter, and the collaborators the app store talks to.
"""

__version__ = "0.1.0"
