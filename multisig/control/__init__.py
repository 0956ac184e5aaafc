from .pausable import PauseSwitch

__all__ = ["PauseSwitch"]
