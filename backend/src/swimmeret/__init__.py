"""Swimmeret stability pools: builder verification and pool demand aggregation."""

__version__ = "0.1.0"
