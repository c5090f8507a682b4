"""Delivery fee estimation."""

from .calculator import FeeCalculator, FeeOptions, Priority

__all__ = ["FeeCalculator", "FeeOptions", "Priority"]
