"""kubepromote: promote and roll back workloads along a Kubernetes environment chain."""

__version__ = "0.3.0"
