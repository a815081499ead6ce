"""Telegram bot package."""
