"""
Domain logic module for business rules.

This package contains the pricing rules, the rental lifecycle and the
onboarding stage machine, independent of storage and notification delivery.
"""
