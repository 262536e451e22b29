"""
Tiered fee policy.

The first ``base_minutes`` cost ``base_price``; each started hour after that
adds ``hourly_rate``. Durations are rounded up to whole minutes first.
"""

from .models import FeeConfig

MS_PER_MINUTE = 60_000


def _ceil_div(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)


class FeePolicy:
    """Pure duration -> fee function parameterised by a FeeConfig"""

    def __init__(self, config: FeeConfig = None):
        self.config = config or FeeConfig()

    def compute_fee(self, duration_ms: int) -> int:
        """
        Compute the fee for a parking duration.

        Args:
            duration_ms: Parked time in milliseconds, must not be negative

        Returns:
            Fee as a non-negative integer
        """
        if duration_ms < 0:
            raise ValueError(f"Duration must not be negative, got {duration_ms}")

        minutes = _ceil_div(duration_ms, MS_PER_MINUTE)
        if minutes <= self.config.base_minutes:
            return self.config.base_price

        extra_hours = _ceil_div(minutes - self.config.base_minutes, 60)
        return self.config.base_price + extra_hours * self.config.hourly_rate

    __call__ = compute_fee


def compute_fee(duration_ms: int, config: FeeConfig = None) -> int:
    """Compute a fee with the given (or default) pricing"""
    return FeePolicy(config).compute_fee(duration_ms)
