from .clusters import ClusterItem, assign_groups

__all__ = ["ClusterItem", "assign_groups"]
