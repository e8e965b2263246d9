"""
A collection of methods for deriving encoder conversion factors from gear reductions.

Gear ratios are given as reductions, e.g. 6.75 for a 6.75:1 gearbox.
"""
import math

RADS_PER_ROTATION = 2 * math.pi
SECONDS_PER_MINUTE = 60


def rotations_to_metres(wheel_diameter: float, gear_ratio: float) -> float:
    """Metres travelled by a wheel per motor rotation"""
    return math.pi * wheel_diameter / gear_ratio


def rotations_to_radians(gear_ratio: float) -> float:
    """Radians turned by a mechanism per motor rotation"""
    return RADS_PER_ROTATION / gear_ratio


def per_minute_to_per_second(factor: float) -> float:
    # Encoders report velocity per minute (RPM); divide by 60 to get the same unit per second
    return factor / SECONDS_PER_MINUTE
