"""toolstash - Commit-keyed build cache for parallel toolchain installations."""

try:
    from ._version import version as __version__
except ImportError:
    # Package is not installed, so version is not available
    __version__ = "0.0.0+unknown"
