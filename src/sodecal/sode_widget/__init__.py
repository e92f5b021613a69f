"""SODE controller and NiceGUI widget."""

from sodecal.sode_widget.controller import SodeController, SodeUpdate

__all__ = ["SodeController", "SodeUpdate"]
