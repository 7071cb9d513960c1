from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Tuple

from wirebox.domain import (
    ConstraintKind,
    ConstructorSignature,
    NeedsDefinitionError,
    ParameterDescriptor,
    UndefinedParamError,
    is_type_name,
    qualified_name,
)

if TYPE_CHECKING:
    from wirebox.application.injector import Injector
    from wirebox.application.registry import BindingRegistry

_MISSING = object()


class ParameterResolver:
    """Determines the value of every parameter of a constructor or callable.

    For each parameter, the first matching source wins:

    a. a per-call override (``":name"`` raw, ``"name"`` a type to make);
    b. a definition registered for the owning type, same notation;
    c. a concrete, aliased, delegated or shared type constraint, made recursively
       without overrides;
    d. an unbound abstract constraint: the default, else ``None`` if nullable;
    e. no constraint: the ``define_param`` fallback, the default, else ``None`` if nullable.

    Overrides and definitions never reach the recursively made dependencies.
    """

    def __init__(self, registry: "BindingRegistry", raw_prefix: str) -> None:
        self._registry = registry
        self._raw_prefix = raw_prefix

    def resolve_arguments(
        self,
        signature: ConstructorSignature,
        injector: "Injector",
        definition: Optional[Mapping[str, Any]] = None,
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> Tuple[List[Any], Dict[str, Any]]:
        """Resolve all parameters of a signature.

        Args:
            signature: The constructor or callable signature.
            injector: Injector used for recursive construction.
            definition: Parameter values registered with ``define`` for the owner.
            overrides: Parameter values supplied for this call only.

        Returns:
            Positional arguments in declaration order and keyword-only arguments.

        Raises:
            NeedsDefinitionError: If an abstract, non-nullable parameter has no binding.
            UndefinedParamError: If an unconstrained parameter has no value source.

        Example:
            >>> class Mailer:
            ...     def __init__(self, transport: Transport, sender):
            ...         ...
            >>> args, kwargs = resolver.resolve_arguments(
            ...     reflector.signature_of(Mailer), injector, overrides={":sender": "noreply@example.com"}
            ... )
        """
        args: List[Any] = []
        kwargs: Dict[str, Any] = {}
        for param in signature.parameters:
            value = self._resolve_parameter(param, signature.type_key, injector, definition, overrides)
            if param.keyword_only:
                kwargs[param.name] = value
            else:
                args.append(value)
        return args, kwargs

    def _resolve_parameter(
        self,
        param: ParameterDescriptor,
        owner_key: str,
        injector: "Injector",
        definition: Optional[Mapping[str, Any]],
        overrides: Optional[Mapping[str, Any]],
    ) -> Any:
        for source in (overrides, definition):
            if source:
                value = self._from_mapping(param.name, source, injector)
                if value is not _MISSING:
                    return value

        if param.constraint is not None:
            if param.constraint_kind is ConstraintKind.CONCRETE or self._registry.is_bound(param.constraint):
                return injector.make(param.constraint)
            if param.has_default:
                return param.default
            if param.nullable:
                return None
            raise NeedsDefinitionError(
                f"Injection definition required for non-concrete parameter {param.name} "
                f"of type {qualified_name(param.constraint)} in {owner_key}",
                type_key=owner_key,
                parameter=param.name,
            )

        fallback = self._registry.param_definition(param.name, _MISSING)
        if fallback is not _MISSING:
            return fallback
        if param.has_default:
            return param.default
        if param.nullable:
            return None
        raise UndefinedParamError(
            f"No definition available to provision typeless parameter {param.name} in {owner_key}",
            type_key=owner_key,
            parameter=param.name,
        )

    def _from_mapping(self, name: str, source: Mapping[str, Any], injector: "Injector") -> Any:
        raw_key = self._raw_prefix + name
        if raw_key in source:
            return source[raw_key]
        if name in source:
            value = source[name]
            if is_type_name(value):
                return injector.make(value)
            return value
        return _MISSING

