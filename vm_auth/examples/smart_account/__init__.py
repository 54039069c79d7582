from .contract import SmartAccount

__all__ = ["SmartAccount"]
