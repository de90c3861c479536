"""SkyScope: live OpenSky aircraft snapshots per map region."""

__version__ = "0.1.0"
