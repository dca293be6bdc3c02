"""Shield overlay rendering."""
from .shield import OverlayConfig, ShieldGeometry, ShieldRenderer

__all__ = ["OverlayConfig", "ShieldGeometry", "ShieldRenderer"]
