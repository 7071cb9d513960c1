import logging
from typing import Any, Dict, List, Mapping, Optional

from wirebox.application.cycle_guard import CycleGuard
from wirebox.application.invokable import Executable, InvokableNormalizer
from wirebox.application.reflector import Reflector
from wirebox.application.registry import BindingRegistry
from wirebox.application.resolver import ParameterResolver
from wirebox.domain import (
    ContainerError,
    DelegationFailureError,
    IInjector,
    InjectorConfig,
    InvalidDelegateError,
    InvokableRef,
    NotInvokableError,
    TypeName,
    normalize_type_key,
)

logger = logging.getLogger(__name__)


class Injector(IInjector):
    """Main dependency injection container.

    Recursively provisions objects by reflecting on constructor signatures and
    consulting the binding tables (aliases, shares, definitions, delegates and
    preparations). Every public operation that provisions objects runs in a
    transaction: shared instances cached during a failed call are dropped.

    Attributes:
        _config: Notation used for raw definitions and method strings.
        _registry: The binding tables, including shared instances.
        _reflector: Introspection collaborator with its signature cache.
        _resolver: Parameter resolution policy.
        _normalizer: Invokable normalizer.
        _cycle_guard: Detects cyclic constructor dependencies.
    """

    def __init__(self, config: Optional[InjectorConfig] = None, reflector: Optional[Reflector] = None) -> None:
        """Initialize the injector with empty binding tables.

        Args:
            config: Optional notation settings; defaults to ``InjectorConfig()``.
            reflector: Optional introspection collaborator, e.g. a test double.
        """
        self._config = config if config is not None else InjectorConfig()
        self._reflector = reflector if reflector is not None else Reflector()
        self._registry = BindingRegistry()
        self._resolver = ParameterResolver(self._registry, self._config.raw_prefix)
        self._normalizer = InvokableNormalizer(self._reflector, self._config)
        self._cycle_guard = CycleGuard()

    @property
    def config(self) -> InjectorConfig:
        return self._config

    def alias(self, original: TypeName, alias: TypeName) -> "Injector":
        """Redirect resolution of ``original`` to ``alias``.

        Chains are followed transitively when resolving.

        Raises:
            NonEmptyStringAliasError: If ``alias`` is blank.
            SharedCannotAliasError: If ``original`` already holds a shared instance of another type.

        Example:
            >>> injector.alias(Cache, RedisCache).alias(RedisCache, ClusterRedisCache)
            >>> isinstance(injector.make(Cache), ClusterRedisCache)
            True
        """
        self._remember(original, alias)
        self._registry.alias(original, alias)
        return self

    def share(self, name_or_instance: Any) -> "Injector":
        """Share a type, or register an existing object as the shared instance of its class.

        Sharing an aliased name shares the alias target. Sharing the same name
        again keeps the instance already cached.

        Raises:
            InvalidArgumentError: If given a scalar or ``None``.
            AliasedCannotShareError: If the instance's class is itself an alias source.

        Example:
            >>> injector.share(Database)
            >>> injector.make(Database) is injector.make(Database)
            True
        """
        if isinstance(name_or_instance, type):
            self._reflector.remember(name_or_instance)
        elif not isinstance(name_or_instance, str) and name_or_instance is not None:
            self._reflector.remember(type(name_or_instance))
        self._registry.share(name_or_instance)
        return self

    def define(self, name: TypeName, params: Mapping[str, Any]) -> "Injector":
        """Register explicit constructor parameter values for one type.

        Keys prefixed with the raw prefix (``":"`` by default) are injected
        verbatim; other values name a type to make. Definitions are not passed
        on to the type's own dependencies.

        Example:
            >>> injector.define(Mailer, {"transport": SmtpTransport, ":sender": "noreply@example.com"})
        """
        self._remember(name)
        self._registry.define(name, params)
        logger.debug("Defined parameters %s for %s", sorted(params), normalize_type_key(name))
        return self

    def define_param(self, param_name: str, value: Any) -> "Injector":
        """Register a fallback value for every unconstrained parameter named ``param_name``."""
        self._registry.define_param(param_name, value)
        return self

    def delegate(self, name: TypeName, invokable: Any) -> "Injector":
        """Register a factory that replaces reflective construction of ``name``.

        The factory is called with ``(name, injector)``, truncated to the number
        of positional parameters it accepts.

        Raises:
            InvalidDelegateError: If ``invokable`` cannot be normalized.

        Example:
            >>> injector.delegate(Settings, lambda name, injector: Settings.from_env())
        """
        try:
            ref = self._normalizer.normalize(invokable)
        except NotInvokableError as e:
            raise InvalidDelegateError(
                f"Cannot delegate {normalize_type_key(name)}: {e}",
                type_key=normalize_type_key(name),
            ) from e
        self._remember(name)
        self._registry.delegate(name, ref)
        logger.debug("Delegated %s to %s", normalize_type_key(name), ref.kind)
        return self

    def prepare(self, name: TypeName, mutator: Any) -> "Injector":
        """Register a mutator called as ``mutator(instance, injector)`` on new instances.

        Mutators registered on a base class or interface run for every subclass.
        A mutator returning another instance of the same class replaces the instance.

        Raises:
            NotInvokableError: If ``mutator`` cannot be normalized.
        """
        ref = self._normalizer.normalize(mutator)
        self._remember(name)
        self._registry.prepare(name, ref)
        return self

    def make(self, name: TypeName, overrides: Optional[Mapping[str, Any]] = None) -> Any:
        """Provision an instance of ``name`` with all dependencies injected.

        Args:
            name: Class or dotted class name.
            overrides: Parameter values for this call only (not passed to dependencies).

        Returns:
            The shared instance if one is cached, otherwise a new instance.

        Raises:
            ContainerError: Tagged with the failure's ``ErrorKind``.

        Example:
            >>> service = injector.make(UserService, {":page_size": 50})
        """
        with self._registry.share_manager.transaction():
            return self._make(name, overrides)

    def build_executable(self, target: Any) -> Executable:
        """Normalize any supported callable shape into an ``Executable``.

        Raises:
            NotInvokableError: If the target is not callable in any supported way.
        """
        ref = self._normalizer.normalize(target)
        with self._registry.share_manager.transaction():
            return self._normalizer.build(ref, self)

    def execute(self, target: Any, overrides: Optional[Mapping[str, Any]] = None) -> Any:
        """Invoke a callable, resolving its parameters like constructor parameters.

        Example:
            >>> injector.execute("app.tasks.Cleanup::run", {":dry_run": True})
        """
        ref = self._normalizer.normalize(target)
        with self._registry.share_manager.transaction():
            executable = self._normalizer.build(ref, self)
            signature = self._reflector.signature_of_callable(executable.func)
            args, kwargs = self._resolver.resolve_arguments(signature, self, None, overrides)
            return executable(*args, **kwargs)

    def inspect_bindings(self, name: Optional[TypeName] = None) -> Dict[str, Dict[str, Any]]:
        """Return a snapshot of the binding tables, optionally restricted to one type."""
        return self._registry.inspect(name)

    def get_registry_copy(self) -> BindingRegistry:
        """Get a copy of the binding tables, shared instances included."""
        return self._registry.copy()

    def set_registry(self, registry: BindingRegistry) -> None:
        """Replace the binding tables, e.g. with a copy taken from another injector."""
        self._registry = registry
        self._resolver = ParameterResolver(self._registry, self._config.raw_prefix)

    def clear(self) -> None:
        """Clear all bindings, shared instances and cached signatures.

        Useful for testing or resetting the injector state.
        """
        self._registry.clear()
        self._reflector.clear_cache()
        self._cycle_guard.clear()

    def _make(self, name: TypeName, overrides: Optional[Mapping[str, Any]]) -> Any:
        chain, terminal = self._registry.resolve_alias(name)
        type_key = chain[-1]
        shares = self._registry.share_manager

        if shares.has_instance(type_key):
            return shares.get(type_key)

        with self._cycle_guard.guard(type_key):
            ref = self._registry.delegate_for(type_key)
            if ref is not None:
                instance = self._call_delegate(ref, terminal, type_key)
            else:
                instance = self._construct(terminal, type_key, overrides)

            instance = self._prepare(instance, chain)

        if self._registry.is_shared_chain(chain):
            shares.mark(type_key)
            shares.store(type_key, instance)
            logger.debug("Cached shared instance of %s", type_key)
        return instance

    def _construct(self, terminal: TypeName, type_key: str, overrides: Optional[Mapping[str, Any]]) -> Any:
        cls = self._reflector.load(terminal)
        signature = self._reflector.signature_of(cls)
        args, kwargs = self._resolver.resolve_arguments(
            signature,
            self,
            self._registry.definition(type_key),
            overrides,
        )
        logger.debug("Constructing %s", type_key)
        return cls(*args, **kwargs)

    def _call_delegate(self, ref: InvokableRef, terminal: TypeName, type_key: str) -> Any:
        executable = self._normalizer.build(ref, self)
        try:
            return executable.call_with_context((terminal, self))
        except ContainerError:
            raise
        except Exception as e:
            raise DelegationFailureError(
                f"Delegate for {type_key} failed: {e}",
                type_key=type_key,
            ) from e

    def _prepare(self, instance: Any, chain: List[str]) -> Any:
        for ref in self._preparations_for(instance, chain):
            result = self._normalizer.build(ref, self).call_with_context((instance, self))
            if result is not None and isinstance(result, type(instance)):
                instance = result
        return instance

    def _preparations_for(self, instance: Any, chain: List[str]) -> List[InvokableRef]:
        # Interfaces the instance was reached through, then its class hierarchy from the most generic.
        keys = chain[:-1]
        keys += [normalize_type_key(klass) for klass in reversed(type(instance).__mro__) if klass is not object]
        keys.append(chain[-1])

        refs: List[InvokableRef] = []
        seen = set()
        for key in keys:
            if key in seen:
                continue
            seen.add(key)
            refs.extend(self._registry.preparations_for(key))
        return refs

    def _remember(self, *names: Any) -> None:
        for name in names:
            if isinstance(name, type):
                self._reflector.remember(name)
