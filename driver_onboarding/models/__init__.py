from .base import Base
from .driver import DriverProfile, DriverStatus
from .document import DriverDocument, DocumentType, REQUIRED_DOCUMENT_TYPES
from .vehicle import Vehicle, VehicleType

__all__ = [
    "Base",
    "DriverProfile",
    "DriverStatus",
    "DriverDocument",
    "DocumentType",
    "REQUIRED_DOCUMENT_TYPES",
    "Vehicle",
    "VehicleType",
]
