"""
Application layer - Resolution engine.

This layer contains the registry, reflection, resolution and invocation logic.
It depends only on the Domain layer.
"""

from .cycle_guard import CycleGuard
from .injector import Injector
from .invokable import Executable, InvokableNormalizer
from .reflector import Reflector, non_public_constructor
from .registry import BindingRegistry
from .resolver import ParameterResolver
from .share_manager import ShareManager

__all__ = [
    "Injector",
    "BindingRegistry",
    "CycleGuard",
    "Executable",
    "InvokableNormalizer",
    "ParameterResolver",
    "Reflector",
    "ShareManager",
    "non_public_constructor",
]
