"""Desktop window host for stackblock."""

from stackblock.simulator.window import SimulatorWindow, WindowConfig

__all__ = ["SimulatorWindow", "WindowConfig"]
