from .adapter import Settlement as Settlement
from .adapter import SettlementState as SettlementState
from .adapter import adapt as adapt
from .exceptions import ArgumentError as ArgumentError
from .exceptions import DualModeError as DualModeError
from .exceptions import MissingCapabilityError as MissingCapabilityError
from .exceptions import OperationError as OperationError
from .logging import setup_logging as setup_logging
from .models import CapabilityManifest as CapabilityManifest
from .models import CapabilityTree as CapabilityTree
from .models import MethodDescriptor as MethodDescriptor
from .patcher import make_dual_mode as make_dual_mode
from .patcher import promisify as promisify
from .proxy import DualModeProxy as DualModeProxy
from .proxy import dual_mode as dual_mode
from .tree import build as build
from .tree import declare as declare

__all__ = [
    "adapt",
    "build",
    "declare",
    "promisify",
    "dual_mode",
    "make_dual_mode",
    "DualModeProxy",
    "Settlement",
    "SettlementState",
    "CapabilityTree",
    "CapabilityManifest",
    "MethodDescriptor",
    "DualModeError",
    "ArgumentError",
    "MissingCapabilityError",
    "OperationError",
    "setup_logging",
]
