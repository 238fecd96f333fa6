
from .itemsarray import ItemsArray
from .rotation import Rotation
from .transformation import Transformation, as_transformation

__all__ = [
    "ItemsArray",
    "Rotation", "Transformation",
    "as_transformation",
]
