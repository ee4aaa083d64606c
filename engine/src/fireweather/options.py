"""Stream options, seed values and diurnal curve parameters.

All three are frozen; a stream replaces them wholesale so every change
passes through the stream and invalidates its calculated values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta

from fireweather.types import FFMCMethod

# Persisted option bits.
METHOD_MASK = 0x3
USE_SPECIFIED_BIT = 0x4
ORIGIN_FILE_BIT = 0x10
ANY_CORRECTED_BIT = 0x20


@dataclass(frozen=True)
class Options:
    """Calculation options for a weather stream."""

    ffmc_method: FFMCMethod = FFMCMethod.VAN_WAGNER
    use_specified_fwi: bool = False
    origin_file: bool = False
    any_corrected: bool = False

    def to_bits(self) -> int:
        bits = int(self.ffmc_method)
        if self.use_specified_fwi:
            bits |= USE_SPECIFIED_BIT
        if self.origin_file:
            bits |= ORIGIN_FILE_BIT
        if self.any_corrected:
            bits |= ANY_CORRECTED_BIT
        return bits

    @classmethod
    def from_bits(cls, bits: int) -> Options:
        method = bits & METHOD_MASK
        return cls(
            ffmc_method=FFMCMethod(method) if method else FFMCMethod.VAN_WAGNER,
            use_specified_fwi=bool(bits & USE_SPECIFIED_BIT),
            origin_file=bool(bits & ORIGIN_FILE_BIT),
            any_corrected=bool(bits & ANY_CORRECTED_BIT),
        )


# Accepted ranges (upper bound None = unbounded).
INITIAL_RANGES: dict[str, tuple[float, float | None]] = {
    "ffmc": (0.0, 101.0),
    "dc": (0.0, 1500.0),
    "dmc": (0.0, 500.0),
    "bui": (0.0, None),
    "rain": (0.0, None),
    "hffmc": (0.0, 101.0),
}

WEATHER_RANGES: dict[str, tuple[float, float | None]] = {
    "temperature": (-50.0, 60.0),
    "rh": (0.0, 100.0),
    "wind_speed": (0.0, None),
    "wind_gust": (0.0, None),
    "wind_direction": (0.0, 360.0),
    "precipitation": (0.0, None),
}

CODE_RANGES: dict[str, tuple[float, float | None]] = {
    "ffmc": (0.0, 101.0),
    "dmc": (0.0, 500.0),
    "dc": (0.0, 1500.0),
    "bui": (0.0, None),
    "isi": (0.0, None),
    "fwi": (0.0, None),
}


def within(ranges: dict[str, tuple[float, float | None]], name: str, value: float) -> bool:
    low, high = ranges[name]
    if value < low:
        return False
    return high is None or value <= high


@dataclass(frozen=True)
class InitialConditions:
    """Codes in effect before the first day of the stream.

    ``hffmc`` and ``hffmc_time`` seed the hourly FFMC recurrence. When
    ``hffmc_time`` is None the seed is the first day's daily FFMC at
    standard-time noon; ``hffmc`` of None means "same as ``ffmc``".
    Defaults are the usual spring start-up values.
    """

    ffmc: float = 85.0
    dc: float = 15.0
    dmc: float = 6.0
    bui: float | None = None
    rain: float = 0.0
    hffmc: float | None = None
    hffmc_time: timedelta | None = None

    @property
    def hourly_ffmc(self) -> float:
        return self.ffmc if self.hffmc is None else self.hffmc

    @staticmethod
    def in_range(name: str, value: float) -> bool:
        return within(INITIAL_RANGES, name, value)


@dataclass(frozen=True)
class CurveParameters:
    """Offsets (hours) and shape of one diurnal curve.

    ``alpha`` shifts the minimum from sunrise, ``beta`` shifts the maximum
    from solar noon and ``gamma`` is the decay of the overnight exponential.
    """

    alpha: float
    beta: float
    gamma: float


def _temperature_curve() -> CurveParameters:
    return CurveParameters(alpha=-0.77, beta=2.80, gamma=-2.20)


def _wind_curve() -> CurveParameters:
    return CurveParameters(alpha=1.00, beta=1.24, gamma=-3.59)


@dataclass(frozen=True)
class DiurnalParameters:
    """Beck and Trevitt (1989) diurnal curve parameters."""

    temperature: CurveParameters = field(default_factory=_temperature_curve)
    wind: CurveParameters = field(default_factory=_wind_curve)
