from .arc import ArcPath
from .base import Path
from .composite import CompositePath, create_recticircle
from .line import LinePath

__all__ = ["Path", "LinePath", "ArcPath", "CompositePath", "create_recticircle"]
