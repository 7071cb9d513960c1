import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from wirebox.application.share_manager import ShareManager
from wirebox.domain import (
    AliasedCannotShareError,
    CyclicAliasError,
    InvalidArgumentError,
    InvokableRef,
    NonEmptyStringAliasError,
    SharedCannotAliasError,
    TypeName,
    clean_name,
    is_type_name,
    normalize_type_key,
)

logger = logging.getLogger(__name__)

# Values that are not object-like enough to be shared as instances
_SCALAR_TYPES = (bool, int, float, complex, bytes, bytearray, list, tuple, dict, set, frozenset)


class BindingRegistry:
    """Holds the binding tables that configure resolution.

    Every table is keyed by TypeKey; names are normalized on the way in.

    Attributes:
        share_manager: Shared marks and cached shared instances.
        _aliases: TypeKey to the type name it is redirected to.
        _definitions: TypeKey to its explicit constructor parameter values.
        _param_definitions: Parameter name to a process-wide fallback value.
        _delegates: TypeKey to the factory replacing reflective construction.
        _preparations: TypeKey to the mutators run on new instances.
    """

    def __init__(self, share_manager: Optional[ShareManager] = None) -> None:
        self.share_manager = share_manager if share_manager is not None else ShareManager()
        self._aliases: Dict[str, TypeName] = {}
        self._definitions: Dict[str, Dict[str, Any]] = {}
        self._param_definitions: Dict[str, Any] = {}
        self._delegates: Dict[str, InvokableRef] = {}
        self._preparations: Dict[str, List[InvokableRef]] = {}

    def resolve_alias(self, name: TypeName) -> Tuple[List[str], TypeName]:
        """Follow the alias chain starting at ``name``.

        Returns:
            The TypeKeys visited (requested key first, terminal key last) and
            the terminal type name as registered, suitable for loading.

        Raises:
            InvalidArgumentError: If ``name`` is neither a class nor a string.
            CyclicAliasError: If the chain revisits a TypeKey.
        """
        if not is_type_name(name):
            raise InvalidArgumentError(f"Expected a class or class name, got {type(name).__name__}")
        type_key = normalize_type_key(name)
        chain = [type_key]
        terminal: TypeName = name
        while type_key in self._aliases:
            terminal = self._aliases[type_key]
            type_key = normalize_type_key(terminal)
            if type_key in chain:
                raise CyclicAliasError(chain + [type_key])
            chain.append(type_key)
        return chain, terminal

    def alias(self, original: TypeName, alias: TypeName) -> None:
        """Redirect ``original`` to ``alias``.

        A pending (not yet materialized) share of ``original`` moves to ``alias``.

        Raises:
            NonEmptyStringAliasError: If the alias target is blank.
            InvalidArgumentError: If ``original`` is neither a class nor a string.
            SharedCannotAliasError: If ``original`` already holds a shared instance of another type.
        """
        if not is_type_name(alias) or (isinstance(alias, str) and not clean_name(alias)):
            raise NonEmptyStringAliasError(
                "Invalid alias: non-empty string or class required at arg 2",
                type_key=normalize_type_key(original) if is_type_name(original) else None,
            )

        if not is_type_name(original):
            raise InvalidArgumentError(f"Expected a class or class name to alias, got {type(original).__name__}")

        original_key = normalize_type_key(original)
        alias_key = normalize_type_key(alias)
        if original_key == alias_key:
            return
        shares = self.share_manager

        if shares.is_shared(original_key):
            if shares.has_instance(original_key):
                instance = shares.get(original_key)
                if normalize_type_key(type(instance)) != alias_key:
                    raise SharedCannotAliasError(
                        f"Cannot alias class {original_key} to {alias_key} because it is currently shared",
                        type_key=original_key,
                    )
                shares.mark(alias_key)
                if not shares.has_instance(alias_key):
                    shares.store(alias_key, instance)
            else:
                shares.mark(alias_key)
            shares.unmark(original_key)

        self._aliases[original_key] = clean_name(alias) if isinstance(alias, str) else alias
        logger.debug("Aliased %s to %s", original_key, alias_key)

    def share(self, name_or_instance: Any) -> str:
        """Mark a type shared or register an instance as the shared one.

        Returns:
            The TypeKey that was marked shared.

        Raises:
            InvalidArgumentError: If given a blank name or a scalar value.
            AliasedCannotShareError: If the instance's TypeKey is an alias source.
        """
        if is_type_name(name_or_instance):
            if isinstance(name_or_instance, str) and not clean_name(name_or_instance):
                raise InvalidArgumentError("share() requires a class name, class or object instance")
            chain, _ = self.resolve_alias(name_or_instance)
            self.share_manager.mark(chain[-1])
            logger.debug("Marked %s shared", chain[-1])
            return chain[-1]

        if name_or_instance is None or isinstance(name_or_instance, _SCALAR_TYPES):
            raise InvalidArgumentError(
                f"share() requires a class name, class or object instance; {type(name_or_instance).__name__} given"
            )

        type_key = normalize_type_key(type(name_or_instance))
        if type_key in self._aliases:
            raise AliasedCannotShareError(
                f"Cannot share class {type_key} because it is currently aliased to "
                f"{normalize_type_key(self._aliases[type_key])}",
                type_key=type_key,
            )
        self.share_manager.mark(type_key)
        self.share_manager.store(type_key, name_or_instance)
        logger.debug("Shared instance of %s", type_key)
        return type_key

    def is_shared_chain(self, chain: List[str]) -> bool:
        """Whether any TypeKey of an alias chain is marked shared."""
        return any(self.share_manager.is_shared(type_key) for type_key in chain)

    def is_bound(self, name: TypeName) -> bool:
        """Whether a type has an alias, a delegate or a shared instance."""
        chain, _ = self.resolve_alias(name)
        if len(chain) > 1:
            return True
        type_key = chain[-1]
        return type_key in self._delegates or self.share_manager.has_instance(type_key)

    def define(self, name: TypeName, params: Mapping[str, Any]) -> None:
        self._definitions[normalize_type_key(name)] = dict(params)

    def definition(self, type_key: str) -> Optional[Dict[str, Any]]:
        return self._definitions.get(type_key)

    def define_param(self, param_name: str, value: Any) -> None:
        self._param_definitions[param_name] = value

    def param_definition(self, param_name: str, default: Any = None) -> Any:
        return self._param_definitions.get(param_name, default)

    def delegate(self, name: TypeName, ref: InvokableRef) -> None:
        self._delegates[normalize_type_key(name)] = ref

    def delegate_for(self, type_key: str) -> Optional[InvokableRef]:
        return self._delegates.get(type_key)

    def prepare(self, name: TypeName, ref: InvokableRef) -> None:
        self._preparations.setdefault(normalize_type_key(name), []).append(ref)

    def preparations_for(self, type_key: str) -> List[InvokableRef]:
        return list(self._preparations.get(type_key, ()))

    def inspect(self, name: Optional[TypeName] = None) -> Dict[str, Dict[str, Any]]:
        """Return a read-only snapshot of the binding tables.

        Args:
            name: Restrict every table to this type's TypeKey.

        Returns:
            Table name mapped to a copy of that table's entries.
        """
        tables: Dict[str, Dict[str, Any]] = {
            "aliases": {key: normalize_type_key(target) for key, target in self._aliases.items()},
            "definitions": {key: dict(params) for key, params in self._definitions.items()},
            "delegates": dict(self._delegates),
            "preparations": {key: list(refs) for key, refs in self._preparations.items()},
            "shares": self.share_manager.snapshot(),
        }
        if name is None:
            tables["param_definitions"] = dict(self._param_definitions)
            return tables

        type_key = normalize_type_key(name)
        return {table: {key: value for key, value in entries.items() if key == type_key} for table, entries in tables.items()}

    def copy(self) -> "BindingRegistry":
        """Return a registry with copies of every table, shared instances included."""
        share_manager = ShareManager()
        share_manager.restore(self.share_manager.snapshot())
        clone = BindingRegistry(share_manager)
        clone._aliases = dict(self._aliases)
        clone._definitions = {key: dict(params) for key, params in self._definitions.items()}
        clone._param_definitions = dict(self._param_definitions)
        clone._delegates = dict(self._delegates)
        clone._preparations = {key: list(refs) for key, refs in self._preparations.items()}
        return clone

    def remove(self, name: TypeName) -> None:
        """Drop every binding registered for a type."""
        type_key = normalize_type_key(name)
        self._aliases.pop(type_key, None)
        self._definitions.pop(type_key, None)
        self._delegates.pop(type_key, None)
        self._preparations.pop(type_key, None)
        self.share_manager.unmark(type_key)

    def clear(self) -> None:
        """Clear all bindings and shared instances."""
        self._aliases.clear()
        self._definitions.clear()
        self._param_definitions.clear()
        self._delegates.clear()
        self._preparations.clear()
        self.share_manager.clear_cache()
