"""Allreview Seeder: trending-topic and image seeding pipeline for the Allreview catalog."""

try:
    from importlib.metadata import version

    __version__ = version("allreview-seeder")
except Exception:
    __version__ = "0.1.0"
