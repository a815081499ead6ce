"""Houseplant watering assistant for Telegram."""
