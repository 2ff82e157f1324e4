from .network_validator import validate_network

__all__ = ['validate_network']
