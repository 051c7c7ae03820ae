"""Onboarding stages and the service-area gate."""
