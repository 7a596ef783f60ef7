"""telegram-connector command-line interface."""
