"""
clinic_collections – collection view controller for the clinic front end.

Import path convention::

    from clinic_collections.kernel.errors import NotFoundError
    from clinic_collections.application.query import FilterSpec, SortSpec, compute_view
    from clinic_collections.application.view import CollectionView
    from clinic_collections.domains.patients import PATIENTS, PatientCodec
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
