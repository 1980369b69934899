"""
Unit conversion and formatting.

Weather is stored in Fahrenheit and mph; these helpers convert to and
from the hunter's preferred display units.
"""

import math

from .models import TemperatureUnit, WindSpeedUnit

KPH_PER_MPH = 1.60934


def _round(value: float) -> int:
    # Halves round up, as display rounding does
    return math.floor(value + 0.5)


def convert_temperature(temp_f: float, unit: TemperatureUnit) -> int:
    if unit is TemperatureUnit.C:
        return _round((temp_f - 32) * 5 / 9)
    return _round(temp_f)


def to_fahrenheit(temp: float, from_unit: TemperatureUnit) -> float:
    """Convert a user-entered temperature back to Fahrenheit for storage."""
    if from_unit is TemperatureUnit.C:
        return _round(temp * 9 / 5 + 32)
    return temp


def format_temperature(temp_f: float, unit: TemperatureUnit) -> str:
    return f"{convert_temperature(temp_f, unit)}°{unit.value}"


def convert_wind_speed(speed_mph: float, unit: WindSpeedUnit) -> int:
    if unit is WindSpeedUnit.KPH:
        return _round(speed_mph * KPH_PER_MPH)
    return _round(speed_mph)


def to_mph(speed: float, from_unit: WindSpeedUnit) -> float:
    """Convert a user-entered wind speed back to mph for storage."""
    if from_unit is WindSpeedUnit.KPH:
        return _round(speed / KPH_PER_MPH)
    return speed


def format_wind_speed(speed_mph: float, unit: WindSpeedUnit) -> str:
    return f"{convert_wind_speed(speed_mph, unit)} {unit.value}"
