from .provider_factory import create_provider

__all__ = [
    "create_provider",
]
