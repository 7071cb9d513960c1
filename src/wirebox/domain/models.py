from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from wirebox.domain.enums import ConstraintKind, InvokableKind
from wirebox.domain.exceptions import CyclicDependencyError


class ParameterDescriptor(BaseModel):
    """Value object describing one constructor or callable parameter.

    Attributes:
        name: Parameter name as declared.
        constraint: Class the parameter is typed with, if it names an injectable class.
        constraint_kind: Whether the constraint is absent, concrete or abstract.
        nullable: Whether ``None`` is an acceptable value.
        has_default: Whether the declaration carries a default.
        default: The declared default, meaningful only when ``has_default`` is set.
        keyword_only: Whether the argument must be passed by keyword.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(..., description="Declared parameter name.")
    constraint: Optional[type] = Field(default=None, description="Injectable class the parameter is typed with.")
    constraint_kind: ConstraintKind = Field(default=ConstraintKind.NONE, description="Kind of type constraint.")
    nullable: bool = Field(default=False, description="Whether None may be injected.")
    has_default: bool = Field(default=False, description="Whether a default value is declared.")
    default: Any = Field(default=None, description="The declared default value.")
    keyword_only: bool = Field(default=False, description="Whether the parameter is keyword-only.")


class ConstructorSignature(BaseModel):
    """Ordered parameter list of a constructor or callable.

    Attributes:
        type_key: TypeKey (or callable name) the signature belongs to.
        parameters: Parameter descriptors in declaration order.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    type_key: str = Field(..., description="Owner of the signature.")
    parameters: Tuple[ParameterDescriptor, ...] = Field(
        default_factory=tuple,
        description="Parameters in declaration order.",
    )


class InvokableRef(BaseModel):
    """Normalized reference to something the injector can call.

    Attributes:
        kind: Which callable shape this reference models.
        target: Function, closure, receiver object or class, depending on ``kind``.
        method_name: Method to look up on ``target`` for method kinds.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: InvokableKind = Field(..., description="Shape of the invokable.")
    target: Any = Field(..., description="Function, receiver or class the invokable is built from.")
    method_name: Optional[str] = Field(default=None, description="Method name for method kinds.")


class ResolutionFrame(BaseModel):
    """Tracks the TypeKeys under construction on the active call path.

    Attributes:
        stack: TypeKeys currently being constructed, outermost first.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    stack: List[str] = Field(
        default_factory=list,
        description="Stack of TypeKeys currently being constructed.",
    )

    def push(self, type_key: str) -> None:
        """Add a TypeKey to the frame.

        Raises:
            CyclicDependencyError: If the key is already under construction.
        """
        if type_key in self.stack:
            cycle = self.stack[self.stack.index(type_key) :] + [type_key]
            raise CyclicDependencyError(cycle)
        self.stack.append(type_key)

    def pop(self) -> None:
        """Remove the most recent TypeKey from the frame."""
        if self.stack:
            self.stack.pop()

    def clear(self) -> None:
        """Clear the entire frame."""
        self.stack.clear()

    @property
    def depth(self) -> int:
        return len(self.stack)


class InjectorConfig(BaseModel):
    """Injector configuration.

    Attributes:
        raw_prefix: Definition key prefix marking a value to inject verbatim.
        method_separator: Separator between a class name and a method name in strings.
        parent_keyword: Keyword selecting an ancestor's implementation of a method.
    """

    model_config = ConfigDict(frozen=True)

    raw_prefix: str = Field(default=":", min_length=1, description="Prefix marking raw definition values.")
    method_separator: str = Field(default="::", min_length=1, description="Class/method separator in strings.")
    parent_keyword: str = Field(default="parent", min_length=1, description="Keyword for ancestor method calls.")
