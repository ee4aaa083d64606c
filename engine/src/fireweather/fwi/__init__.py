"""Canadian Fire Weather Index (FWI) System."""

from fireweather.fwi.calculator import FWICalculator
from fireweather.fwi.chain import FWIChain

__all__ = ["FWICalculator", "FWIChain"]
