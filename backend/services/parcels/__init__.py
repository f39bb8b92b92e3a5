from .lineage_service import LineageService

__all__ = ["LineageService"]
