"""k8sintellect: Kubernetes issue aggregation powered by k8sgpt."""

__version__ = "0.1.0"
