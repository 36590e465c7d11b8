"""Booking core: interval model, availability engine and lifecycle controller.

Nothing in this package imports FastAPI; storage and notifications are
reached through the protocols in :mod:`cottagebook.booking.lifecycle`.
"""
