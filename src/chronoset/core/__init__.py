from .metadata import MetadataRecord
from .record import SortedRecord

__all__ = ["MetadataRecord", "SortedRecord"]
