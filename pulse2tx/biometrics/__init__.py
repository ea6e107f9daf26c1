"""
Heart-rate enrichment: sample stores and the window resolver.
"""

from pulse2tx.biometrics.resolver import (
    WINDOW_HALF_WIDTH_SEC,
    BiometricWindowResolver,
    HeartRateAuthorization,
)
from pulse2tx.biometrics.store import (
    HeartRateSample,
    HeartRateStore,
    InMemoryHeartRateStore,
    load_heart_rate_csv,
)

__all__ = [
    "WINDOW_HALF_WIDTH_SEC",
    "BiometricWindowResolver",
    "HeartRateAuthorization",
    "HeartRateSample",
    "HeartRateStore",
    "InMemoryHeartRateStore",
    "load_heart_rate_csv",
]
