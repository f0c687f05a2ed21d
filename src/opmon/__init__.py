"""Prepare OpenShift clusters for Dynatrace monitoring of cluster operators."""

__version__ = "0.1.0"
