from .contract import TokenContract

__all__ = ["TokenContract"]
