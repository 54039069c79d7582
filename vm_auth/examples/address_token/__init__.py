from .contract import AddressToken

__all__ = ["AddressToken"]
