"""
Utility modules for signal preprocessing.
"""

from .preprocessing import carry_forward, round_half_up, trailing_moving_average

__all__ = ["carry_forward", "round_half_up", "trailing_moving_average"]
