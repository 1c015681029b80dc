from crm.domains.ownership.entities import OwnershipScope

__all__ = ["OwnershipScope"]
