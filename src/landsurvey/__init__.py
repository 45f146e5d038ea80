"""Land-survey address and parcel resolution service."""

__version__ = "0.1.0"
