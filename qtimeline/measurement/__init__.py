"""Measurement of amplitude vectors."""

from .measurer import AmplitudeEntry, Measurer

__all__ = ["Measurer", "AmplitudeEntry"]
