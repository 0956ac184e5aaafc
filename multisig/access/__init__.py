from .roles import RoleRegistry

__all__ = ["RoleRegistry"]
