from .observability import StructlogContextMiddleware

__all__ = ["StructlogContextMiddleware"]
