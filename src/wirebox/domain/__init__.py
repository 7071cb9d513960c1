"""
Domain layer - Core models, errors and contracts.

This layer contains the fundamental rules and value objects of the injector.
It has no dependencies on other layers.
"""

from .enums import ConstraintKind, ErrorKind, InvokableKind
from .exceptions import (
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
from .interfaces import IInjector, IReflector, IShareManager
from .models import ConstructorSignature, InjectorConfig, InvokableRef, ParameterDescriptor, ResolutionFrame
from .type_key import TypeName, clean_name, is_type_name, normalize_type_key, qualified_name

__all__ = [
    # Enums
    "ConstraintKind",
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
    # Interfaces
    "IInjector",
    "IReflector",
    "IShareManager",
    # Models
    "ConstructorSignature",
    "InjectorConfig",
    "InvokableRef",
    "ParameterDescriptor",
    "ResolutionFrame",
    # Type keys
    "TypeName",
    "clean_name",
    "is_type_name",
    "normalize_type_key",
    "qualified_name",
]
