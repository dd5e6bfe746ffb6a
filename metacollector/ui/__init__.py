from metacollector.ui.app import MetaCollectorApp
from metacollector.ui.keymap import UiAction, translate_key

__all__ = [
    "MetaCollectorApp",
    "UiAction",
    "translate_key",
]
