from nebenkosten.models.property import Property

__all__ = ["Property"]
