from enum import Enum


class ErrorKind(str, Enum):
    """Machine-checkable sub-kind carried by every container failure.

    Attributes:
        NEEDS_DEFINITION: Non-concrete type (or parameter) with no binding.
        UNDEFINED_PARAM: Unconstrained parameter with no value source.
        CYCLIC_DEPENDENCY: A type reappears on its own construction path.
        CYCLIC_ALIAS: An alias chain loops back onto itself.
        NON_PUBLIC_CONSTRUCTOR: Constructor is not callable by the container.
        CLASS_LOAD_FAILURE: Type name cannot be located.
        ALIASED_CANNOT_SHARE: Instance shared under a key that is an alias source.
        SHARED_CANNOT_ALIAS: Alias registered over an already materialized share.
        NON_EMPTY_STRING_ALIAS: Alias target is blank.
        INVALID_ARGUMENT: A type name, class or instance was expected and something else was given.
        INVALID_DELEGATE: Delegate target cannot be normalized.
        DELEGATION_FAILURE: A delegate raised while producing an instance.
        NOT_INVOKABLE: Target cannot be normalized into an executable.
    """

    NEEDS_DEFINITION = "needs_definition"
    UNDEFINED_PARAM = "undefined_param"
    CYCLIC_DEPENDENCY = "cyclic_dependency"
    CYCLIC_ALIAS = "cyclic_alias"
    NON_PUBLIC_CONSTRUCTOR = "non_public_constructor"
    CLASS_LOAD_FAILURE = "class_load_failure"
    ALIASED_CANNOT_SHARE = "aliased_cannot_share"
    SHARED_CANNOT_ALIAS = "shared_cannot_alias"
    NON_EMPTY_STRING_ALIAS = "non_empty_string_alias"
    INVALID_ARGUMENT = "invalid_argument"
    INVALID_DELEGATE = "invalid_delegate"
    DELEGATION_FAILURE = "delegation_failure"
    NOT_INVOKABLE = "not_invokable"

    def __str__(self) -> str:
        return self.value


class InvokableKind(str, Enum):
    """Shapes of callables accepted by the invokable normalizer."""

    FUNCTION = "function"
    CLOSURE = "closure"
    BOUND_METHOD = "bound_method"
    UNBOUND_METHOD = "unbound_method"
    PARENT_METHOD = "parent_method"
    CALL_OPERATOR_OBJECT = "call_operator_object"

    def __str__(self) -> str:
        return self.value


class ConstraintKind(str, Enum):
    """Classification of a parameter's declared type.

    Attributes:
        NONE: No annotation, or an annotation that does not name an injectable class.
        CONCRETE: An instantiable class.
        ABSTRACT: An abstract base class or protocol.
    """

    NONE = "none"
    CONCRETE = "concrete"
    ABSTRACT = "abstract"

    def __str__(self) -> str:
        return self.value
