from .contract import ExampleContract

__all__ = ["ExampleContract"]
