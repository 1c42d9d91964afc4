"""Application view – the facade list screens bind to."""
from clinic_collections.application.view.collection_view import (
    CollectionDefinition,
    CollectionView,
)

__all__ = ["CollectionDefinition", "CollectionView"]
