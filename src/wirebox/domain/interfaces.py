from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Mapping, Optional

from wirebox.domain.models import ConstructorSignature
from wirebox.domain.type_key import TypeName


class IInjector(ABC):
    """Abstract interface for the dependency injection container."""

    @abstractmethod
    def make(self, name: TypeName, overrides: Optional[Mapping[str, Any]] = None) -> Any:
        """Construct (or fetch the shared instance of) a type.

        Args:
            name: Type name or class to provision.
            overrides: Per-call parameter values, keyed by parameter name.
        """

    @abstractmethod
    def share(self, name_or_instance: Any) -> "IInjector":
        """Mark a type as shared, or register an existing instance as shared."""

    @abstractmethod
    def alias(self, original: TypeName, alias: TypeName) -> "IInjector":
        """Redirect resolution of ``original`` to ``alias``."""

    @abstractmethod
    def define(self, name: TypeName, params: Mapping[str, Any]) -> "IInjector":
        """Register explicit constructor parameter values for a type."""

    @abstractmethod
    def define_param(self, param_name: str, value: Any) -> "IInjector":
        """Register a fallback value for unconstrained parameters named ``param_name``."""

    @abstractmethod
    def delegate(self, name: TypeName, invokable: Any) -> "IInjector":
        """Register a factory that replaces reflective construction for a type."""

    @abstractmethod
    def prepare(self, name: TypeName, mutator: Any) -> "IInjector":
        """Register a mutator run on every new instance of a type."""

    @abstractmethod
    def build_executable(self, target: Any) -> Callable[..., Any]:
        """Normalize any supported callable shape into an executable."""

    @abstractmethod
    def execute(self, target: Any, overrides: Optional[Mapping[str, Any]] = None) -> Any:
        """Invoke a callable, resolving its parameters."""


class IReflector(ABC):
    """Abstract interface for runtime type introspection."""

    @abstractmethod
    def load(self, name: TypeName) -> type:
        """Locate a class by name.

        Raises:
            ClassLoadFailureError: If the name does not denote a loadable class.
        """

    @abstractmethod
    def is_concrete(self, cls: type) -> bool:
        """Whether the class can be instantiated directly."""

    @abstractmethod
    def signature_of(self, cls: type) -> ConstructorSignature:
        """Return the constructor signature of a concrete class.

        Raises:
            NeedsDefinitionError: If the class is abstract.
            NonPublicConstructorError: If the constructor is not public.
        """

    @abstractmethod
    def signature_of_callable(self, func: Callable[..., Any]) -> ConstructorSignature:
        """Return the signature of an arbitrary callable."""


class IShareManager(ABC):
    """Abstract interface for shared-instance bookkeeping."""

    @abstractmethod
    def mark(self, type_key: str) -> None:
        """Mark a TypeKey shared without an instance."""

    @abstractmethod
    def is_shared(self, type_key: str) -> bool:
        """Whether the TypeKey is marked shared."""

    @abstractmethod
    def has_instance(self, type_key: str) -> bool:
        """Whether a shared instance has been materialized for the TypeKey."""

    @abstractmethod
    def get(self, type_key: str) -> Any:
        """Return the cached instance for a TypeKey."""

    @abstractmethod
    def store(self, type_key: str, instance: Any) -> None:
        """Cache an instance for a TypeKey."""

    @abstractmethod
    def snapshot(self) -> Dict[str, Any]:
        """Return a copy of the share table."""

    @abstractmethod
    def clear_cache(self) -> None:
        """Forget all shares and cached instances."""
