"""Connectivity probes run from the workstation."""

from .prometheus import NO_RESPONSE, probe_query_endpoint

__all__ = ["NO_RESPONSE", "probe_query_endpoint"]
