from typing import List, Optional

from wirebox.domain.enums import ErrorKind


class ContainerError(Exception):
    """Base exception for every injector failure.

    Attributes:
        kind: Sub-kind tag callers can branch on without string matching.
        type_key: TypeKey being resolved when the failure happened, if any.
        parameter: Constructor or callable parameter involved, if any.
    """

    kind: ErrorKind = ErrorKind.NEEDS_DEFINITION

    def __init__(
        self,
        message: str = "",
        type_key: Optional[str] = None,
        parameter: Optional[str] = None,
    ) -> None:
        self.type_key = type_key
        self.parameter = parameter
        super().__init__(message)


class NeedsDefinitionError(ContainerError):
    """Raised when a non-concrete type has no alias, delegate or shared instance.

    This occurs when:
    - An abstract class or protocol is requested directly.
    - A constructor parameter is typed with one and is neither nullable nor defaulted.
    """

    kind = ErrorKind.NEEDS_DEFINITION


class UndefinedParamError(ContainerError):
    """Raised when an unconstrained parameter has no value source."""

    kind = ErrorKind.UNDEFINED_PARAM


class CyclicDependencyError(ContainerError):
    """Raised when a type reappears on its own construction path.

    Attributes:
        dependency_chain: TypeKeys from the first occurrence back to the repeat.
    """

    kind = ErrorKind.CYCLIC_DEPENDENCY

    def __init__(self, dependency_chain: List[str]) -> None:
        self.dependency_chain = dependency_chain
        message = f"Detected a cyclic dependency while provisioning: {' -> '.join(dependency_chain)}"
        super().__init__(message, type_key=dependency_chain[-1] if dependency_chain else None)


class CyclicAliasError(ContainerError):
    """Raised when an alias chain revisits a TypeKey.

    Attributes:
        alias_chain: TypeKeys visited, ending with the repeated one.
    """

    kind = ErrorKind.CYCLIC_ALIAS

    def __init__(self, alias_chain: List[str]) -> None:
        self.alias_chain = alias_chain
        message = f"Alias chain loops back onto itself: {' -> '.join(alias_chain)}"
        super().__init__(message, type_key=alias_chain[0] if alias_chain else None)


class NonPublicConstructorError(ContainerError):
    """Raised when a class marks its constructor as not callable by the container."""

    kind = ErrorKind.NON_PUBLIC_CONSTRUCTOR


class ClassLoadFailureError(ContainerError):
    """Raised when a type name cannot be imported or located."""

    kind = ErrorKind.CLASS_LOAD_FAILURE


class AliasedCannotShareError(ContainerError):
    """Raised when sharing an instance whose TypeKey is already an alias source."""

    kind = ErrorKind.ALIASED_CANNOT_SHARE


class SharedCannotAliasError(ContainerError):
    """Raised when aliasing a key that already holds a different shared instance."""

    kind = ErrorKind.SHARED_CANNOT_ALIAS


class NonEmptyStringAliasError(ContainerError):
    """Raised when an alias target is blank."""

    kind = ErrorKind.NON_EMPTY_STRING_ALIAS


class InvalidArgumentError(ContainerError):
    """Raised when an operation receives something other than a type name, class or instance."""

    kind = ErrorKind.INVALID_ARGUMENT


class InvalidDelegateError(ContainerError):
    """Raised when a delegate cannot be normalized into an invokable."""

    kind = ErrorKind.INVALID_DELEGATE


class DelegationFailureError(ContainerError):
    """Raised when a registered delegate fails while producing an instance.

    The original exception is chained as ``__cause__``.
    """

    kind = ErrorKind.DELEGATION_FAILURE


class NotInvokableError(ContainerError):
    """Raised when a target cannot be normalized into an executable.

    This occurs when:
    - A plain object without ``__call__`` is given.
    - A string names a missing function, class or method.
    - A class is given whose instances are not callable.
    """

    kind = ErrorKind.NOT_INVOKABLE
