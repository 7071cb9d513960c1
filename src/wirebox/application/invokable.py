"""Application layer - Normalization of callable shapes into executables."""

import inspect
from typing import TYPE_CHECKING, Any, Callable, Optional, Sequence

from wirebox.application.reflector import Reflector
from wirebox.domain import (
    ClassLoadFailureError,
    InjectorConfig,
    InvokableKind,
    InvokableRef,
    NotInvokableError,
    clean_name,
    qualified_name,
)

if TYPE_CHECKING:
    from wirebox.application.injector import Injector


def defines_call_operator(cls: type) -> bool:
    """Whether instances of ``cls`` are callable (``type.__call__`` does not count)."""
    return any("__call__" in klass.__dict__ for klass in cls.__mro__ if klass is not object)


def positional_arity(func: Callable[..., Any]) -> Optional[int]:
    """Number of positional parameters ``func`` accepts, or None when unbounded."""
    try:
        parameters = inspect.signature(func).parameters.values()
    except (TypeError, ValueError):
        return None
    count = 0
    for param in parameters:
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return None
        if param.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            count += 1
    return count


class Executable:
    """A normalized invokable, ready to be called.

    Calling an executable forwards the arguments as given; the injector's
    ``execute`` resolves them from the callable's signature instead.

    Attributes:
        func: The underlying callable (function, bound method, callable object).
        ref: The normalized reference the executable was built from.
    """

    def __init__(self, func: Callable[..., Any], ref: InvokableRef) -> None:
        self.func = func
        self.ref = ref

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.func(*args, **kwargs)

    def call_with_context(self, context: Sequence[Any]) -> Any:
        """Call with as many leading context values as the callable accepts positionally."""
        arity = positional_arity(self.func)
        if arity is not None:
            context = context[:arity]
        return self.func(*context)

    def __repr__(self) -> str:
        return f"Executable({self.ref.kind}, {self.func!r})"


class InvokableNormalizer:
    """Turns every supported callable shape into an ``InvokableRef`` and then an ``Executable``.

    Supported shapes:
    - function objects, closures and ``"pkg.module.func"`` strings;
    - bound methods and ``(instance, "method")`` pairs;
    - ``(cls, "method")`` pairs and ``"pkg.module.Cls::method"`` strings;
    - ``(cls, "parent::method")`` pairs and ``"pkg.module.Cls::parent::method"`` strings;
    - objects defining ``__call__`` (``functools.partial`` included);
    - classes (or class names) whose instances define ``__call__``.

    Normalization never instantiates anything; receivers for instance methods
    are made by the injector when the executable is built.
    """

    def __init__(self, reflector: Reflector, config: InjectorConfig) -> None:
        self._reflector = reflector
        self._separator = config.method_separator
        self._parent_keyword = config.parent_keyword

    def normalize(self, target: Any) -> InvokableRef:
        """Describe a target as an ``InvokableRef``.

        Raises:
            NotInvokableError: If the target is not one of the supported shapes.
        """
        if isinstance(target, str):
            return self._normalize_string(target)

        if isinstance(target, (tuple, list)):
            if len(target) != 2 or not isinstance(target[1], str):
                raise NotInvokableError(f"Invalid invokable: expected a (receiver, method) pair, got {target!r}")
            receiver, method_name = target
            if isinstance(receiver, (str, type)):
                return self._method_ref(self._load_class(receiver), method_name)
            return self._instance_method_ref(receiver, method_name)

        if inspect.isclass(target):
            return self._class_ref(target)

        if inspect.ismethod(target):
            return InvokableRef(
                kind=InvokableKind.BOUND_METHOD,
                target=target.__self__,
                method_name=target.__func__.__name__,
            )

        if inspect.isfunction(target):
            if target.__name__ == "<lambda>" or "<locals>" in target.__qualname__:
                return InvokableRef(kind=InvokableKind.CLOSURE, target=target)
            return InvokableRef(kind=InvokableKind.FUNCTION, target=target)

        if inspect.isbuiltin(target):
            return InvokableRef(kind=InvokableKind.FUNCTION, target=target)

        if callable(target):
            if defines_call_operator(type(target)):
                return InvokableRef(kind=InvokableKind.CALL_OPERATOR_OBJECT, target=target)
            return InvokableRef(kind=InvokableKind.CLOSURE, target=target)

        raise NotInvokableError(f"Invalid invokable: {type(target).__name__} instance is not callable")

    def build(self, ref: InvokableRef, injector: "Injector") -> Executable:
        """Materialize a reference, making the receiver of instance methods through ``injector``.

        Raises:
            NotInvokableError: If the method can no longer be found.
        """
        if ref.kind in (InvokableKind.FUNCTION, InvokableKind.CLOSURE, InvokableKind.CALL_OPERATOR_OBJECT):
            return Executable(ref.target, ref)

        if ref.kind is InvokableKind.BOUND_METHOD:
            return Executable(getattr(ref.target, ref.method_name), ref)

        if ref.kind is InvokableKind.UNBOUND_METHOD:
            cls = ref.target
            if self._is_static_or_class_method(cls, ref.method_name):
                return Executable(getattr(cls, ref.method_name), ref)
            receiver = injector.make(cls)
            return Executable(getattr(receiver, ref.method_name), ref)

        # InvokableKind.PARENT_METHOD
        if not inspect.isclass(ref.target):
            receiver = ref.target
            return Executable(getattr(super(type(receiver), receiver), ref.method_name), ref)

        cls = ref.target
        owner = self._ancestor_defining(cls, ref.method_name)
        if owner is None:
            raise NotInvokableError(f"Invalid invokable: no ancestor of {qualified_name(cls)} defines {ref.method_name}")
        if isinstance(owner.__dict__[ref.method_name], (staticmethod, classmethod)):
            return Executable(getattr(super(cls, cls), ref.method_name), ref)
        receiver = injector.make(cls)
        return Executable(getattr(super(cls, receiver), ref.method_name), ref)

    def _normalize_string(self, target: str) -> InvokableRef:
        cleaned = clean_name(target)
        if self._separator in cleaned:
            class_name, _, method_name = cleaned.partition(self._separator)
            return self._method_ref(self._load_class(class_name), method_name)

        try:
            located = self._reflector.locate(cleaned)
        except LookupError as e:
            raise NotInvokableError(f"Invalid invokable: function {target} does not exist") from e

        if inspect.isclass(located):
            return self._class_ref(self._reflector.remember(located))
        if callable(located):
            return InvokableRef(kind=InvokableKind.FUNCTION, target=located)
        raise NotInvokableError(f"Invalid invokable: {target} is not callable")

    def _class_ref(self, cls: type) -> InvokableRef:
        if not defines_call_operator(cls):
            raise NotInvokableError(f"Invalid invokable: instances of {qualified_name(cls)} are not callable")
        return InvokableRef(kind=InvokableKind.UNBOUND_METHOD, target=cls, method_name="__call__")

    def _method_ref(self, cls: type, method_name: str) -> InvokableRef:
        parent_prefix = self._parent_keyword + self._separator
        if method_name.startswith(parent_prefix):
            method_name = method_name[len(parent_prefix) :]
            if not method_name or self._ancestor_defining(cls, method_name) is None:
                raise NotInvokableError(
                    f"Invalid invokable: no ancestor of {qualified_name(cls)} defines {method_name or '(empty)'}"
                )
            return InvokableRef(kind=InvokableKind.PARENT_METHOD, target=cls, method_name=method_name)

        if not method_name or not callable(getattr(cls, method_name, None)):
            raise NotInvokableError(f"Invalid invokable: {qualified_name(cls)} has no method {method_name or '(empty)'}")
        return InvokableRef(kind=InvokableKind.UNBOUND_METHOD, target=cls, method_name=method_name)

    def _instance_method_ref(self, receiver: Any, method_name: str) -> InvokableRef:
        parent_prefix = self._parent_keyword + self._separator
        if method_name.startswith(parent_prefix):
            method_name = method_name[len(parent_prefix) :]
            if self._ancestor_defining(type(receiver), method_name) is None:
                raise NotInvokableError(
                    f"Invalid invokable: no ancestor of {type(receiver).__name__} defines {method_name or '(empty)'}"
                )
            return InvokableRef(kind=InvokableKind.PARENT_METHOD, target=receiver, method_name=method_name)

        if not callable(getattr(receiver, method_name, None)):
            raise NotInvokableError(f"Invalid invokable: {type(receiver).__name__} has no method {method_name}")
        return InvokableRef(kind=InvokableKind.BOUND_METHOD, target=receiver, method_name=method_name)

    def _load_class(self, name: Any) -> type:
        try:
            return self._reflector.load(name)
        except ClassLoadFailureError as e:
            raise NotInvokableError(f"Invalid invokable: class {name} does not exist") from e

    @staticmethod
    def _ancestor_defining(cls: type, method_name: str) -> Optional[type]:
        for klass in cls.__mro__[1:]:
            if method_name in klass.__dict__:
                return klass
        return None

    @staticmethod
    def _is_static_or_class_method(cls: type, method_name: str) -> bool:
        return isinstance(inspect.getattr_static(cls, method_name, None), (staticmethod, classmethod))
