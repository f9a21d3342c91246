"""Pricing and order-construction core for a long/short position token market maker."""

__version__ = "0.1.0"
