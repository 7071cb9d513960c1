"""
wirebox: Reflection-driven dependency injection container with auto-wiring.

Public API exports for the wirebox package.
"""

# Application exports
from wirebox.application.injector import Injector
from wirebox.application.invokable import Executable
from wirebox.application.reflector import non_public_constructor

# Domain exports
from wirebox.domain.enums import ErrorKind, InvokableKind
from wirebox.domain.exceptions import (
    AliasedCannotShareError,
    ClassLoadFailureError,
    ContainerError,
    CyclicAliasError,
    CyclicDependencyError,
    DelegationFailureError,
    InvalidArgumentError,
    InvalidDelegateError,
    NeedsDefinitionError,
    NonEmptyStringAliasError,
    NonPublicConstructorError,
    NotInvokableError,
    SharedCannotAliasError,
    UndefinedParamError,
)
from wirebox.domain.models import InjectorConfig

__version__ = "0.1.0"

__all__ = [
    # Injector
    "Injector",
    "InjectorConfig",
    "Executable",
    "non_public_constructor",
    # Enums
    "ErrorKind",
    "InvokableKind",
    # Exceptions
    "ContainerError",
    "NeedsDefinitionError",
    "UndefinedParamError",
    "CyclicDependencyError",
    "CyclicAliasError",
    "NonPublicConstructorError",
    "ClassLoadFailureError",
    "AliasedCannotShareError",
    "SharedCannotAliasError",
    "NonEmptyStringAliasError",
    "InvalidArgumentError",
    "InvalidDelegateError",
    "DelegationFailureError",
    "NotInvokableError",
]
