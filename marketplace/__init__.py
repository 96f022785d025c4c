"""Booking notification and checkout service."""
