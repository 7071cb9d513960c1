"""Unit tests for Reflector."""

import collections
from abc import ABC, abstractmethod
from typing import Optional, Protocol

import pytest

from wirebox.application.reflector import Reflector, non_public_constructor
from wirebox.domain import (
    ClassLoadFailureError,
    ConstraintKind,
    IReflector,
    NeedsDefinitionError,
    NonPublicConstructorError,
    normalize_type_key,
)


class Clock:
    pass


class Repository(ABC):
    @abstractmethod
    def find(self, item_id):
        pass


class Notifier(Protocol):
    def notify(self, message: str) -> None:
        ...


class ConsoleNotifier(Notifier):
    def notify(self, message: str) -> None:
        print(message)


class Service:
    def __init__(self, clock: Clock, repository: Repository, notifier: Optional[Notifier], retries: int, label="svc"):
        self.clock = clock


class ForwardService:
    def __init__(self, clock: "Clock"):
        self.clock = clock


@non_public_constructor
class Connection:
    @classmethod
    def open(cls):
        return cls()


class PooledConnection(Connection):
    pass


class PublicConnection(Connection):
    def __init__(self):
        pass


def name_of(cls):
    return f"{cls.__module__}.{cls.__qualname__}"


def _make_service_class(label_default):
    class Service:
        def __init__(self, label=label_default):
            self.label = label

    return Service


class TestLoading:
    """Test cases for locating classes by name."""

    def test_implements_interface(self):
        """Test that Reflector implements IReflector."""
        assert isinstance(Reflector(), IReflector)

    def test_load_class_object(self):
        """Test that classes are returned as given."""
        assert Reflector().load(Clock) is Clock

    def test_load_dotted_name(self):
        """Test that a dotted name is imported."""
        assert Reflector().load("collections.OrderedDict") is collections.OrderedDict

    def test_load_name_with_leading_separator(self):
        """Test that leading separators are ignored."""
        assert Reflector().load(".collections.OrderedDict") is collections.OrderedDict
        assert Reflector().load("\\collections\\OrderedDict") is collections.OrderedDict

    def test_load_module_level_test_class(self):
        """Test that classes of this module load by their qualified name."""
        assert Reflector().load(name_of(Clock)) is Clock

    def test_load_builtin(self):
        """Test that builtins load by their bare name."""
        assert Reflector().load("object") is object

    def test_load_remembered_class_case_insensitively(self):
        """Test that a class seen before is found whatever the case."""
        reflector = Reflector()
        reflector.remember(Clock)

        assert reflector.load(name_of(Clock).upper()) is Clock

    @pytest.mark.parametrize("name", ["no.such.module.Thing", "collections.NoSuchThing", "NoSuchBuiltin", ""])
    def test_load_unknown_name_raises(self, name):
        """Test that unknown names raise ClassLoadFailureError."""
        with pytest.raises(ClassLoadFailureError):
            Reflector().load(name)

    def test_load_non_class_raises(self):
        """Test that names denoting functions are not classes."""
        with pytest.raises(ClassLoadFailureError):
            Reflector().load("collections.namedtuple")

    def test_load_unseen_class_case_insensitively(self):
        """Test that a differently-cased name finds a class never seen before."""
        assert Reflector().load("Collections.ordereddict") is collections.OrderedDict


class TestConcreteness:
    """Test cases for concrete/abstract detection."""

    def test_plain_class_is_concrete(self):
        """Test that ordinary classes are concrete."""
        assert Reflector().is_concrete(Clock)

    def test_abstract_class_is_not_concrete(self):
        """Test that ABCs with abstract methods are not concrete."""
        assert not Reflector().is_concrete(Repository)

    def test_protocol_is_not_concrete(self):
        """Test that protocols are not concrete."""
        assert not Reflector().is_concrete(Notifier)

    def test_protocol_implementation_is_concrete(self):
        """Test that explicit protocol implementations are concrete."""
        assert Reflector().is_concrete(ConsoleNotifier)

    def test_non_public_constructor_is_inherited(self):
        """Test that the marker applies to subclasses without their own constructor."""
        reflector = Reflector()

        assert not reflector.has_public_constructor(Connection)
        assert not reflector.has_public_constructor(PooledConnection)
        assert reflector.has_public_constructor(PublicConnection)


class TestSignatures:
    """Test cases for constructor signature reflection."""

    def test_signature_describes_parameters(self):
        """Test that every parameter is described in order."""
        signature = Reflector().signature_of(Service)
        params = {param.name: param for param in signature.parameters}

        assert [param.name for param in signature.parameters] == ["clock", "repository", "notifier", "retries", "label"]
        assert params["clock"].constraint is Clock
        assert params["clock"].constraint_kind == ConstraintKind.CONCRETE
        assert params["repository"].constraint_kind == ConstraintKind.ABSTRACT
        assert params["notifier"].constraint is Notifier
        assert params["notifier"].nullable
        assert params["retries"].constraint is None
        assert params["retries"].constraint_kind == ConstraintKind.NONE
        assert params["label"].has_default
        assert params["label"].default == "svc"

    def test_signature_type_key(self):
        """Test that signatures are keyed by the class's TypeKey."""
        assert Reflector().signature_of(Clock).type_key == normalize_type_key(Clock)

    def test_forward_reference_is_resolved(self):
        """Test that string annotations resolve against the owner module."""
        signature = Reflector().signature_of(ForwardService)

        assert signature.parameters[0].constraint is Clock

    def test_none_default_makes_parameter_nullable(self):
        """Test that a None default implies nullability."""

        class Consumer:
            def __init__(self, repository: Repository = None):
                self.repository = repository

        param = Reflector().signature_of(Consumer).parameters[0]

        assert param.nullable
        assert param.has_default

    def test_var_arguments_are_skipped(self):
        """Test that *args and **kwargs are not described."""

        class Flexible:
            def __init__(self, first, *args, **kwargs):
                pass

        signature = Reflector().signature_of(Flexible)

        assert [param.name for param in signature.parameters] == ["first"]

    def test_keyword_only_parameters(self):
        """Test that keyword-only parameters are flagged."""

        class Configured:
            def __init__(self, *, strict=False):
                pass

        assert Reflector().signature_of(Configured).parameters[0].keyword_only

    def test_inherited_constructor(self):
        """Test that a subclass without __init__ reports its parent's parameters."""

        class Child(ForwardService):
            pass

        assert [param.name for param in Reflector().signature_of(Child).parameters] == ["clock"]

    def test_signature_is_cached(self):
        """Test that the same signature object is returned on repeated calls."""
        reflector = Reflector()

        assert reflector.signature_of(Service) is reflector.signature_of(Service)

    def test_cache_distinguishes_classes_with_the_same_name(self):
        """Test that classes sharing a qualified name keep their own signatures."""
        first = _make_service_class("first")
        second = _make_service_class("second")
        reflector = Reflector()

        assert normalize_type_key(first) == normalize_type_key(second)
        assert reflector.signature_of(first).parameters[0].default == "first"
        assert reflector.signature_of(second).parameters[0].default == "second"

    def test_clear_cache(self):
        """Test that clear_cache drops cached signatures."""
        reflector = Reflector()
        first = reflector.signature_of(Service)
        reflector.clear_cache()

        assert reflector.signature_of(Service) is not first

    def test_abstract_class_needs_definition(self):
        """Test that abstract classes have no usable constructor."""
        with pytest.raises(NeedsDefinitionError):
            Reflector().signature_of(Repository)

    def test_non_public_constructor_raises(self):
        """Test that marked constructors are refused."""
        with pytest.raises(NonPublicConstructorError):
            Reflector().signature_of(Connection)

    def test_signature_of_callable(self):
        """Test that plain functions are described like constructors."""

        def handler(clock: Clock, *, verbose=False):
            return clock

        signature = Reflector().signature_of_callable(handler)

        assert signature.parameters[0].constraint is Clock
        assert signature.parameters[1].keyword_only

    def test_signature_of_bound_method_skips_self(self):
        """Test that bound methods do not expose their receiver."""

        class Handler:
            def handle(self, clock: Clock):
                return clock

        signature = Reflector().signature_of_callable(Handler().handle)

        assert [param.name for param in signature.parameters] == ["clock"]
        assert signature.parameters[0].constraint is Clock

    def test_signature_of_callable_object(self):
        """Test that callable objects are described through __call__."""

        class Handler:
            def __call__(self, clock: Clock):
                return clock

        signature = Reflector().signature_of_callable(Handler())

        assert signature.parameters[0].constraint is Clock
