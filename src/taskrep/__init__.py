"""TaskRep workflow service.

Derives status sequences from configurable workflow transitions and
validates task status changes against them.
"""

from taskrep.config import Settings

__version__ = "0.1.0"
__all__ = ["Settings", "__version__"]
