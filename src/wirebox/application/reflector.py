import builtins
import importlib
import inspect
import logging
import sys
import types
from typing import Any, Callable, Dict, Optional, Tuple, TypeVar, Union, get_args, get_origin, get_type_hints

from wirebox.domain import (
    ClassLoadFailureError,
    ConstraintKind,
    ConstructorSignature,
    IReflector,
    NeedsDefinitionError,
    NonPublicConstructorError,
    ParameterDescriptor,
    TypeName,
    clean_name,
    normalize_type_key,
    qualified_name,
)

logger = logging.getLogger(__name__)

NON_PUBLIC_CONSTRUCTOR_ATTR = "__wirebox_non_public_constructor__"

C = TypeVar("C", bound=type)


def non_public_constructor(cls: C) -> C:
    """Class decorator marking a constructor the injector must not call.

    Instances of such classes can still be shared explicitly, e.g. when they
    are built through a factory classmethod.

    Example:
        >>> @non_public_constructor
        ... class Connection:
        ...     @classmethod
        ...     def open(cls) -> "Connection":
        ...         return cls()
    """
    setattr(cls, NON_PUBLIC_CONSTRUCTOR_ATTR, True)
    return cls


class Reflector(IReflector):
    """Introspects classes and callables and caches constructor signatures.

    Uses Python's inspect module and type hints to describe parameters.
    Every class seen is remembered under its TypeKey, which lets names that
    only differ in case find a class that was already loaded.

    Attributes:
        _classes: Classes seen so far, keyed by TypeKey.
        _signatures: Cached constructor signatures, keyed by class.
    """

    def __init__(self) -> None:
        self._classes: Dict[str, type] = {}
        self._signatures: Dict[type, ConstructorSignature] = {}

    def remember(self, cls: type) -> type:
        """Record a class under its TypeKey and return it."""
        self._classes.setdefault(normalize_type_key(cls), cls)
        return cls

    def locate(self, name: str) -> Any:
        """Import whatever a dotted name denotes (module attribute, class, function).

        Raises:
            LookupError: If nothing can be found under the name.
        """
        cleaned = clean_name(name)
        if not cleaned:
            raise LookupError(name)

        known = self._classes.get(cleaned.lower())
        if known is not None:
            return known

        parts = cleaned.split(".")
        if len(parts) == 1:
            if hasattr(builtins, cleaned):
                return getattr(builtins, cleaned)
            raise LookupError(name)

        # Longest importable module prefix wins; the rest is an attribute path.
        for split in range(len(parts) - 1, 0, -1):
            target: Any = self._import_module(".".join(parts[:split]))
            if target is None:
                continue
            try:
                for attribute in parts[split:]:
                    target = self._get_attribute(target, attribute)
            except AttributeError:
                continue
            return target

        raise LookupError(name)

    @staticmethod
    def _import_module(module_name: str) -> Optional[types.ModuleType]:
        try:
            return importlib.import_module(module_name)
        except ImportError:
            pass
        lowered = module_name.lower()
        for loaded_name, module in list(sys.modules.items()):
            if module is not None and loaded_name.lower() == lowered:
                return module
        return None

    @staticmethod
    def _get_attribute(owner: Any, attribute: str) -> Any:
        try:
            return getattr(owner, attribute)
        except AttributeError:
            lowered = attribute.lower()
            for candidate in dir(owner):
                if candidate.lower() == lowered:
                    return getattr(owner, candidate)
            raise

    def load(self, name: TypeName) -> type:
        """Locate a class by name or return the class given.

        Raises:
            ClassLoadFailureError: If the name does not denote a class.
        """
        if isinstance(name, type):
            return self.remember(name)

        type_key = normalize_type_key(name)
        try:
            target = self.locate(name)
        except LookupError as e:
            raise ClassLoadFailureError(f"Could not make {name}: class does not exist", type_key=type_key) from e

        if not inspect.isclass(target):
            raise ClassLoadFailureError(f"Could not make {name}: it does not name a class", type_key=type_key)
        return self.remember(target)

    def is_concrete(self, cls: type) -> bool:
        if inspect.isabstract(cls):
            return False
        # typing.Protocol classes themselves, not their explicit implementations
        return not cls.__dict__.get("_is_protocol", False)

    def has_public_constructor(self, cls: type) -> bool:
        for klass in cls.__mro__:
            if NON_PUBLIC_CONSTRUCTOR_ATTR in klass.__dict__:
                return False
            if "__init__" in klass.__dict__ or "__new__" in klass.__dict__:
                return True
        return True

    def signature_of(self, cls: type) -> ConstructorSignature:
        """Return the (cached) constructor signature of a concrete class.

        Raises:
            NeedsDefinitionError: If the class is abstract or a protocol.
            NonPublicConstructorError: If the class is marked with ``non_public_constructor``.
        """
        type_key = normalize_type_key(cls)
        cached = self._signatures.get(cls)
        if cached is not None:
            return cached

        if not self.is_concrete(cls):
            raise NeedsDefinitionError(
                f"Injection definition required for non-concrete type {qualified_name(cls)}",
                type_key=type_key,
            )
        if not self.has_public_constructor(cls):
            raise NonPublicConstructorError(
                f"Cannot instantiate {qualified_name(cls)}: constructor is not public",
                type_key=type_key,
            )

        try:
            signature = inspect.signature(cls)
        except (TypeError, ValueError):
            # Some builtins expose no introspectable signature; treat them as argument-free.
            signature = inspect.Signature()

        initializer = self._find_initializer(cls)
        hints = self._safe_type_hints(initializer) if initializer is not None else {}
        owner_module = sys.modules.get(cls.__module__)

        result = ConstructorSignature(
            type_key=type_key,
            parameters=self._describe_parameters(signature, hints, owner_module),
        )
        self._signatures[cls] = result
        logger.debug("Cached constructor signature for %s (%d parameters)", type_key, len(result.parameters))
        return result

    def signature_of_callable(self, func: Callable[..., Any]) -> ConstructorSignature:
        try:
            signature = inspect.signature(func)
        except (TypeError, ValueError):
            signature = inspect.Signature()

        hinted: Any = func
        if not (inspect.isfunction(func) or inspect.ismethod(func)) and hasattr(type(func), "__call__"):
            hinted = type(func).__call__
        owner_module = sys.modules.get(getattr(hinted, "__module__", "") or "")

        return ConstructorSignature(
            type_key=getattr(func, "__qualname__", None) or repr(func),
            parameters=self._describe_parameters(signature, self._safe_type_hints(hinted), owner_module),
        )

    def clear_cache(self) -> None:
        """Forget cached signatures."""
        self._signatures.clear()

    @staticmethod
    def _find_initializer(cls: type) -> Optional[Callable[..., Any]]:
        for klass in cls.__mro__:
            if klass is object:
                return None
            if "__init__" in klass.__dict__:
                return klass.__dict__["__init__"]
        return None

    @staticmethod
    def _safe_type_hints(func: Any) -> Dict[str, Any]:
        try:
            return get_type_hints(func)
        except (AttributeError, NameError, TypeError):
            return {}

    def _describe_parameters(
        self,
        signature: inspect.Signature,
        hints: Dict[str, Any],
        owner_module: Optional[types.ModuleType],
    ) -> Tuple[ParameterDescriptor, ...]:
        descriptors = []
        for param_name, param in signature.parameters.items():
            # Skip *args and **kwargs parameters (VAR_POSITIONAL and VAR_KEYWORD)
            if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                continue

            annotation = hints.get(param_name, param.annotation)
            has_default = param.default is not inspect.Parameter.empty
            constraint, nullable = self._unwrap_annotation(annotation, owner_module)
            if has_default and param.default is None:
                nullable = True

            if constraint is None:
                kind = ConstraintKind.NONE
            elif self.is_concrete(constraint):
                kind = ConstraintKind.CONCRETE
            else:
                kind = ConstraintKind.ABSTRACT

            descriptors.append(
                ParameterDescriptor(
                    name=param_name,
                    constraint=constraint,
                    constraint_kind=kind,
                    nullable=nullable,
                    has_default=has_default,
                    default=param.default if has_default else None,
                    keyword_only=param.kind == inspect.Parameter.KEYWORD_ONLY,
                )
            )
        return tuple(descriptors)

    def _unwrap_annotation(
        self,
        annotation: Any,
        owner_module: Optional[types.ModuleType],
    ) -> Tuple[Optional[type], bool]:
        """Reduce an annotation to (injectable class or None, nullable)."""
        if annotation is inspect.Parameter.empty:
            return None, False
        if annotation is None or annotation is type(None):
            return None, True

        if isinstance(annotation, str):
            annotation = self._resolve_forward_reference(annotation, owner_module)
            if annotation is None:
                return None, False

        nullable = False
        if get_origin(annotation) in (Union, types.UnionType):
            members = get_args(annotation)
            non_none = [member for member in members if member is not type(None)]
            nullable = len(non_none) < len(members)
            if len(non_none) != 1:
                return None, nullable
            annotation = non_none[0]

        if not inspect.isclass(annotation) or annotation.__module__ == "builtins":
            return None, nullable
        return self.remember(annotation), nullable

    def _resolve_forward_reference(self, annotation: str, owner_module: Optional[types.ModuleType]) -> Any:
        if owner_module is not None and hasattr(owner_module, annotation):
            return getattr(owner_module, annotation)
        try:
            return self.locate(annotation)
        except LookupError:
            return None
