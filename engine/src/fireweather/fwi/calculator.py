"""Canadian Fire Weather Index (FWI) System equations.

Complete implementation based on:
    Van Wagner, C.E. (1987). Development and structure of the Canadian
    Forest Fire Weather Index System. Forestry Technical Report 35.
    Van Wagner, C.E. (1977). A method of computing fine fuel moisture
    content throughout the diurnal cycle. Information Report PS-X-69.
    Lawson, B.D., Armitage, O.B. and Hoskins, W.D. (1996). Diurnal
    variation in the Fine Fuel Moisture Code. FRDA Report 245.
    Forestry Canada Fire Danger Group (1992). Development and structure
    of the Canadian Forest Fire Behavior Prediction System (ISI form).

Daily codes come from standard noon observations; the hourly FFMC
recurrences step the code one hour (or part of an hour) at a time.
"""

from __future__ import annotations

import math

# Day length factors for DMC calculation by month, by latitude band.
# Index 0 is unused (months are 1-12).
_DMC_DAY_LENGTH_NORTH = [0.0, 6.5, 7.5, 9.0, 12.8, 13.9, 13.9, 12.4, 10.9, 9.4, 8.0, 7.0, 6.0]
_DMC_DAY_LENGTH_NORTH_SUBTROPIC = [0.0, 7.9, 8.4, 8.9, 9.5, 9.9, 10.2, 10.1, 9.7, 9.1, 8.6, 8.1, 7.8]
_DMC_DAY_LENGTH_SOUTH_SUBTROPIC = [0.0, 10.1, 9.6, 9.1, 8.5, 8.1, 7.8, 7.9, 8.3, 8.9, 9.4, 9.9, 10.2]
_DMC_DAY_LENGTH_SOUTH = [0.0, 11.5, 10.5, 9.2, 7.9, 6.8, 6.2, 6.5, 7.4, 8.7, 10.0, 11.2, 11.8]
_DMC_DAY_LENGTH_EQUATOR = 9.0

# Day length factors for DC calculation by month.
_DC_DAY_LENGTH_NORTH = [0.0, -1.6, -1.6, -1.6, 0.9, 3.8, 5.8, 6.4, 5.0, 2.4, 0.4, -1.6, -1.6]
_DC_DAY_LENGTH_SOUTH = [0.0, 6.4, 5.0, 2.4, 0.4, -1.6, -1.6, -1.6, -1.6, -1.6, 0.9, 3.8, 5.8]
_DC_DAY_LENGTH_EQUATOR = 1.4

# Moisture content scale factors: daily (1987) and hourly (1977) forms.
_DAILY_FACTOR = 147.2
_HOURLY_FACTOR = 147.27723

SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 86400

# Trailing 48-hour rain (mm) at which the hybrid method is fully Van Wagner.
HYBRID_RAIN_THRESHOLD = 0.5


def ffmc_to_moisture(ffmc: float, factor: float = _HOURLY_FACTOR) -> float:
    return factor * (101.0 - ffmc) / (59.5 + ffmc)


def moisture_to_ffmc(m: float, factor: float = _HOURLY_FACTOR) -> float:
    return max(0.0, min(101.0, 59.5 * (250.0 - m) / (factor + m)))


def _rain_wetting(mo: float, rain: float) -> float:
    """Moisture content after rain ``rain`` (mm) on fuel at ``mo``."""
    mr = mo + 42.5 * rain * math.exp(-100.0 / (251.0 - mo)) * (1.0 - math.exp(-6.93 / rain))
    if mo > 150.0:
        mr += 0.0015 * (mo - 150.0) ** 2 * math.sqrt(rain)
    return min(mr, 250.0)


def _equilibrium(temp: float, rh: float) -> tuple[float, float]:
    """Drying and wetting equilibrium moisture contents."""
    ed = (
        0.942 * rh**0.679
        + 11.0 * math.exp((rh - 100.0) / 10.0)
        + 0.18 * (21.1 - temp) * (1.0 - 1.0 / math.exp(0.115 * rh))
    )
    ew = (
        0.618 * rh**0.753
        + 10.0 * math.exp((rh - 100.0) / 10.0)
        + 0.18 * (21.1 - temp) * (1.0 - 1.0 / math.exp(0.115 * rh))
    )
    return ed, ew


def _log_drying_rate(rh: float, wind: float) -> float:
    return 0.424 * (1.0 - (rh / 100.0) ** 1.7) + 0.0694 * math.sqrt(wind) * (
        1.0 - (rh / 100.0) ** 8
    )


def _log_wetting_rate(rh: float, wind: float) -> float:
    return 0.424 * (1.0 - ((100.0 - rh) / 100.0) ** 1.7) + 0.0694 * math.sqrt(
        wind
    ) * (1.0 - ((100.0 - rh) / 100.0) ** 8)


class FWICalculator:
    """Canadian Fire Weather Index System calculator.

    Stateless apart from the latitude used to pick day-length factors;
    callers supply the previous day's (or hour's) codes explicitly.
    """

    def __init__(self, latitude: float = 46.0):
        """Initialize for a location.

        Args:
            latitude: Degrees north; selects the DMC and DC day-length
                tables (default: 46.0, the original Canadian tables)
        """
        self.latitude = latitude

    def dmc_day_length(self, month: int) -> float:
        lat = self.latitude
        if lat > 30.0:
            return _DMC_DAY_LENGTH_NORTH[month]
        if lat > 10.0:
            return _DMC_DAY_LENGTH_NORTH_SUBTROPIC[month]
        if lat > -10.0:
            return _DMC_DAY_LENGTH_EQUATOR
        if lat > -30.0:
            return _DMC_DAY_LENGTH_SOUTH_SUBTROPIC[month]
        return _DMC_DAY_LENGTH_SOUTH[month]

    def dc_day_length(self, month: int) -> float:
        if self.latitude > 20.0:
            return _DC_DAY_LENGTH_NORTH[month]
        if self.latitude <= -20.0:
            return _DC_DAY_LENGTH_SOUTH[month]
        return _DC_DAY_LENGTH_EQUATOR

    def calculate_ffmc(
        self, temp: float, rh: float, wind: float, rain: float, ffmc_prev: float
    ) -> float:
        """Calculate daily Fine Fuel Moisture Code.

        Represents moisture content of surface litter (top 1-2 cm).
        Time lag: 2/3 day.

        Args:
            temp: Noon temperature (Celsius)
            rh: Noon relative humidity (%)
            wind: Noon wind speed at 10m (km/h)
            rain: 24-hour rainfall (mm)
            ffmc_prev: Previous day's FFMC

        Returns:
            FFMC value (0-101 scale)
        """
        mo = ffmc_to_moisture(ffmc_prev, _DAILY_FACTOR)

        # Rain adjustment
        if rain > 0.5:
            mo = _rain_wetting(mo, rain - 0.5)

        ed, ew = _equilibrium(temp, rh)

        if mo > ed:
            # Drying
            kd = _log_drying_rate(rh, wind) * 0.581 * math.exp(0.0365 * temp)
            m = ed + (mo - ed) * 10.0 ** (-kd)
        elif mo < ew:
            # Wetting
            kw = _log_wetting_rate(rh, wind) * 0.581 * math.exp(0.0365 * temp)
            m = ew - (ew - mo) * 10.0 ** (-kw)
        else:
            m = mo

        return moisture_to_ffmc(m, _DAILY_FACTOR)

    def calculate_hourly_ffmc(
        self,
        temp: float,
        rh: float,
        wind: float,
        rain: float,
        ffmc_prev: float,
        seconds: float = SECONDS_PER_HOUR,
    ) -> float:
        """Step the hourly FFMC forward (Van Wagner 1977).

        Args:
            temp: Temperature (Celsius)
            rh: Relative humidity (%)
            wind: Wind speed at 10m (km/h)
            rain: Rain over the step (mm)
            ffmc_prev: FFMC at the start of the step
            seconds: Step length (default: one hour)

        Returns:
            FFMC at the end of the step
        """
        hours = seconds / SECONDS_PER_HOUR
        mo = ffmc_to_moisture(ffmc_prev)
        if rain > 0.0:
            mo = _rain_wetting(mo, rain)

        ed, ew = _equilibrium(temp, rh)
        if mo > ed:
            kd = _log_drying_rate(rh, wind) * 0.0579 * math.exp(0.0365 * temp)
            m = ed + (mo - ed) * 10.0 ** (-kd * hours)
        elif mo < ew:
            kw = _log_wetting_rate(rh, wind) * 0.0579 * math.exp(0.0365 * temp)
            m = ew - (ew - mo) * 10.0 ** (-kw * hours)
        else:
            m = mo
        return moisture_to_ffmc(m)

    def calculate_previous_hourly_ffmc(
        self, temp: float, rh: float, wind: float, rain: float, ffmc: float
    ) -> float:
        """Invert one hourly step: the FFMC an hour before ``ffmc``.

        The weather is that of the hour ending at ``ffmc``. The forward step
        is monotonic in its starting FFMC, so the inverse is found by
        bisection; targets outside the reachable range clamp to 0 or 101.
        """
        low, high = 0.0, 101.0
        if self.calculate_hourly_ffmc(temp, rh, wind, rain, low) >= ffmc:
            return low
        if self.calculate_hourly_ffmc(temp, rh, wind, rain, high) <= ffmc:
            return high
        for _ in range(60):
            mid = 0.5 * (low + high)
            if self.calculate_hourly_ffmc(temp, rh, wind, rain, mid) < ffmc:
                low = mid
            else:
                high = mid
        return 0.5 * (low + high)

    @staticmethod
    def calculate_lawson_ffmc(
        ffmc_prev_day: float, ffmc_today: float, seconds: float
    ) -> float:
        """Contiguous hourly FFMC between two daily codes.

        Moisture content moves linearly from the previous day's daily FFMC
        at standard-time midnight to today's by the next midnight; the
        previous hour's value plays no part.

        Args:
            ffmc_prev_day: Previous day's daily FFMC
            ffmc_today: Today's daily FFMC
            seconds: Seconds since standard-time midnight
        """
        fraction = min(max(seconds / SECONDS_PER_DAY, 0.0), 1.0)
        m_prev = ffmc_to_moisture(ffmc_prev_day)
        m_today = ffmc_to_moisture(ffmc_today)
        return moisture_to_ffmc(m_prev + (m_today - m_prev) * fraction)

    def calculate_hybrid_ffmc(
        self,
        ffmc_prev_day: float,
        ffmc_today: float,
        ffmc_prev_hour: float,
        rain48: list[float],
        temp: float,
        rh: float,
        wind: float,
        seconds: float,
    ) -> float:
        """Hourly FFMC blending the Lawson curve with the Van Wagner step.

        Dry spells follow the Lawson daily interpolation; recent rain moves
        the result toward the hour-by-hour Van Wagner recurrence, fully so
        once the trailing 48 hours hold HYBRID_RAIN_THRESHOLD mm.

        Args:
            ffmc_prev_day: Previous day's daily FFMC
            ffmc_today: Today's daily FFMC
            ffmc_prev_hour: Previous hour's FFMC
            rain48: Hourly rain, current hour first, 48 entries
            temp: Temperature (Celsius)
            rh: Relative humidity (%)
            wind: Wind speed (km/h)
            seconds: Seconds since standard-time midnight
        """
        van_wagner = self.calculate_hourly_ffmc(temp, rh, wind, rain48[0], ffmc_prev_hour)
        lawson = self.calculate_lawson_ffmc(ffmc_prev_day, ffmc_today, seconds)
        weight = min(sum(rain48) / HYBRID_RAIN_THRESHOLD, 1.0)
        return weight * van_wagner + (1.0 - weight) * lawson

    def calculate_dmc(
        self, temp: float, rh: float, rain: float, month: int, dmc_prev: float
    ) -> float:
        """Calculate Duff Moisture Code.

        Represents moisture of loosely compacted organic layers (7-10 cm).
        Time lag: ~15 days.

        Args:
            temp: Noon temperature (Celsius)
            rh: Noon relative humidity (%)
            rain: 24-hour rainfall (mm)
            month: Month (1-12)
            dmc_prev: Previous day's DMC

        Returns:
            DMC value (0+ scale)
        """
        if rain > 1.5:
            re = 0.92 * rain - 1.27
            mo = 20.0 + math.exp(5.6348 - dmc_prev / 43.43)

            if dmc_prev <= 33.0:
                b = 100.0 / (0.5 + 0.3 * dmc_prev)
            elif dmc_prev <= 65.0:
                b = 14.0 - 1.3 * math.log(dmc_prev)
            else:
                b = 6.2 * math.log(dmc_prev) - 17.2

            mr = mo + 1000.0 * re / (48.77 + b * re)
            pr = 244.72 - 43.43 * math.log(mr - 20.0)
            dmc_prev = max(0.0, pr)

        dl = self.dmc_day_length(month)

        if temp > -1.1:
            k = 1.894 * (temp + 1.1) * (100.0 - rh) * dl * 1e-6
            dmc = dmc_prev + 100.0 * k
        else:
            dmc = dmc_prev

        return max(0.0, dmc)

    def calculate_dc(
        self, temp: float, rain: float, month: int, dc_prev: float
    ) -> float:
        """Calculate Drought Code.

        Represents moisture of deep compact organic layers (10-20 cm).
        Time lag: ~52 days.

        Args:
            temp: Noon temperature (Celsius)
            rain: 24-hour rainfall (mm)
            month: Month (1-12)
            dc_prev: Previous day's DC

        Returns:
            DC value (0+ scale)
        """
        if rain > 2.8:
            rd = 0.83 * rain - 1.27
            qo = 800.0 * math.exp(-dc_prev / 400.0)
            qr = qo + 3.937 * rd
            dr = 400.0 * math.log(800.0 / qr)
            dc_prev = max(0.0, dr)

        lf = self.dc_day_length(month)

        if temp > -2.8:
            v = 0.36 * (temp + 2.8) + lf
            if v < 0.0:
                v = 0.0
            dc = dc_prev + 0.5 * v
        else:
            dc = dc_prev

        return max(0.0, dc)

    @staticmethod
    def calculate_isi(ffmc: float, wind: float, seconds: float = SECONDS_PER_DAY) -> float:
        """Calculate Initial Spread Index (FBP form).

        Combines FFMC and wind to represent fire spread potential. Daily
        codes use the 1987 moisture scale, hourly codes the 1977 one.

        Args:
            ffmc: Fine Fuel Moisture Code
            wind: Wind speed at 10m (km/h)
            seconds: Period the FFMC describes (default: one day)

        Returns:
            ISI value (0+ scale)
        """
        factor = _DAILY_FACTOR if seconds >= SECONDS_PER_DAY else _HOURLY_FACTOR
        m = ffmc_to_moisture(ffmc, factor)
        ff = 91.9 * math.exp(-0.1386 * m) * (1.0 + m**5.31 / 4.93e7)
        if wind < 40.0:
            fw = math.exp(0.05039 * wind)
        else:
            fw = 12.0 * (1.0 - math.exp(-0.0818 * (wind - 28.0)))
        return 0.208 * fw * ff

    @staticmethod
    def calculate_bui(dmc: float, dc: float) -> float:
        """Calculate Buildup Index.

        Combines DMC and DC to represent total fuel available.

        Args:
            dmc: Duff Moisture Code
            dc: Drought Code

        Returns:
            BUI value (0+ scale)
        """
        if dmc == 0.0 and dc == 0.0:
            return 0.0
        if dmc <= 0.4 * dc:
            bui = 0.8 * dmc * dc / (dmc + 0.4 * dc)
        else:
            bui = dmc - (1.0 - 0.8 * dc / (dmc + 0.4 * dc)) * (0.92 + (0.0114 * dmc) ** 1.7)
        return max(0.0, bui)

    @staticmethod
    def calculate_fwi(isi: float, bui: float) -> float:
        """Calculate Fire Weather Index.

        Overall fire danger rating combining spread potential and fuel available.

        Args:
            isi: Initial Spread Index
            bui: Buildup Index

        Returns:
            FWI value (0+ scale)
        """
        if bui <= 80.0:
            fd = 0.626 * bui**0.809 + 2.0
        else:
            fd = 1000.0 / (25.0 + 108.64 * math.exp(-0.023 * bui))

        b = 0.1 * isi * fd

        if b <= 1.0:
            return b
        return math.exp(2.72 * (0.434 * math.log(b)) ** 0.647)
