"""Application gateway – remote collection port and in-memory backend."""
from clinic_collections.application.gateway.in_memory import InMemoryCollectionGateway
from clinic_collections.application.gateway.port import CollectionGateway, ListResult

__all__ = ["CollectionGateway", "InMemoryCollectionGateway", "ListResult"]
