"""anchorsvc - anchor directory blocks into external chains."""

from .bus import AnchorBus
from .encoding import prepend_block_height
from .service import Anchor, AnchorService
from .types import DirectoryBlockAnchorInfo

__version__ = "0.1.0"

__all__ = ["Anchor", "AnchorBus", "AnchorService", "DirectoryBlockAnchorInfo", "prepend_block_height"]
