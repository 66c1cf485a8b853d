"""Street Safety: crowd-voted street crime reports with proximity alerts."""

__version__ = "1.0.0"
