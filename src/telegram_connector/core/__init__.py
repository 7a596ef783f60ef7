"""Core services: configuration, logging, exceptions and the rate limiter."""
