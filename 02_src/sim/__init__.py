"""SIM module."""

from support_desk.api.routes.control import ISim

from .sim import Sim

__all__ = ["ISim", "Sim"]
