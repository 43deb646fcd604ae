from .reconciler import NetworkReconciler, NetworkState

__all__ = ["NetworkReconciler", "NetworkState"]
