"""Telegram domain types, the provider capability, and its Telethon implementation."""
