"""Notification scheduler package."""
