"""Port interfaces (hexagonal architecture)."""

from .alias import AliasPort
from .builder import BuilderPort
from .cache import ArtifactCachePort, CheckoutCachePort
from .clock import ClockPort
from .logger import LoggerPort
from .metrics import MetricsPort
from .mirror import MirrorPort
from .runner import RunnerPort

__all__ = [
    "AliasPort",
    "ArtifactCachePort",
    "BuilderPort",
    "CheckoutCachePort",
    "ClockPort",
    "LoggerPort",
    "MetricsPort",
    "MirrorPort",
    "RunnerPort",
]
