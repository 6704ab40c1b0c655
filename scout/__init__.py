"""Rental Scout — discovery agent for fresh, owner-posted rental listings."""
