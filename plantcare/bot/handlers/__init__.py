"""Telegram bot handlers."""
