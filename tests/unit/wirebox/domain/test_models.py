"""Unit tests for domain models."""

import pytest
from pydantic import ValidationError

from wirebox.domain.enums import ConstraintKind, InvokableKind
from wirebox.domain.exceptions import CyclicDependencyError
from wirebox.domain.models import (
    ConstructorSignature,
    InjectorConfig,
    InvokableRef,
    ParameterDescriptor,
    ResolutionFrame,
)


class Transport:
    pass


class TestParameterDescriptor:
    """Test cases for the ParameterDescriptor model."""

    def test_descriptor_defaults(self):
        """Test that an unconstrained parameter has sensible defaults."""
        descriptor = ParameterDescriptor(name="sender")

        assert descriptor.constraint is None
        assert descriptor.constraint_kind == ConstraintKind.NONE
        assert descriptor.nullable is False
        assert descriptor.has_default is False
        assert descriptor.keyword_only is False

    def test_descriptor_with_constraint(self):
        """Test a parameter typed with a concrete class."""
        descriptor = ParameterDescriptor(
            name="transport",
            constraint=Transport,
            constraint_kind=ConstraintKind.CONCRETE,
        )

        assert descriptor.constraint is Transport
        assert descriptor.constraint_kind == ConstraintKind.CONCRETE

    def test_descriptor_is_frozen(self):
        """Test that descriptors are immutable."""
        descriptor = ParameterDescriptor(name="sender")

        with pytest.raises(ValidationError):
            descriptor.name = "other"

    def test_descriptor_requires_name(self):
        """Test that the name is mandatory."""
        with pytest.raises(ValidationError):
            ParameterDescriptor()


class TestConstructorSignature:
    """Test cases for the ConstructorSignature model."""

    def test_signature_keeps_parameter_order(self):
        """Test that parameters stay in declaration order."""
        signature = ConstructorSignature(
            type_key="app.mailer",
            parameters=(ParameterDescriptor(name="transport"), ParameterDescriptor(name="sender")),
        )

        assert [param.name for param in signature.parameters] == ["transport", "sender"]

    def test_signature_defaults_to_no_parameters(self):
        """Test that a signature without parameters is valid."""
        assert ConstructorSignature(type_key="app.clock").parameters == ()

    def test_signature_is_frozen(self):
        """Test that signatures are immutable."""
        signature = ConstructorSignature(type_key="app.clock")

        with pytest.raises(ValidationError):
            signature.type_key = "app.other"


class TestInvokableRef:
    """Test cases for the InvokableRef model."""

    def test_function_ref(self):
        """Test a reference to a plain function."""
        ref = InvokableRef(kind=InvokableKind.FUNCTION, target=len)

        assert ref.target is len
        assert ref.method_name is None

    def test_method_ref(self):
        """Test a reference to a method of a class."""
        ref = InvokableRef(kind=InvokableKind.UNBOUND_METHOD, target=Transport, method_name="send")

        assert ref.target is Transport
        assert ref.method_name == "send"

    def test_kind_is_validated(self):
        """Test that unknown kinds are rejected."""
        with pytest.raises(ValidationError):
            InvokableRef(kind="teleport", target=len)


class TestResolutionFrame:
    """Test cases for the ResolutionFrame model."""

    def test_push_and_pop(self):
        """Test that keys can be pushed and popped."""
        frame = ResolutionFrame()

        frame.push("app.a")
        frame.push("app.b")
        assert frame.stack == ["app.a", "app.b"]
        assert frame.depth == 2

        frame.pop()
        assert frame.stack == ["app.a"]

    def test_push_detects_cycle(self):
        """Test that pushing a key already on the frame raises."""
        frame = ResolutionFrame()
        frame.push("app.a")
        frame.push("app.b")

        with pytest.raises(CyclicDependencyError) as exc_info:
            frame.push("app.a")

        assert exc_info.value.dependency_chain == ["app.a", "app.b", "app.a"]

    def test_cycle_chain_starts_at_first_occurrence(self):
        """Test that the reported chain omits keys outside the cycle."""
        frame = ResolutionFrame()
        for key in ("app.root", "app.a", "app.b"):
            frame.push(key)

        with pytest.raises(CyclicDependencyError) as exc_info:
            frame.push("app.a")

        assert exc_info.value.dependency_chain == ["app.a", "app.b", "app.a"]

    def test_pop_on_empty_frame(self):
        """Test that popping an empty frame is a no-op."""
        frame = ResolutionFrame()
        frame.pop()

        assert frame.depth == 0

    def test_clear(self):
        """Test that clear empties the frame."""
        frame = ResolutionFrame()
        frame.push("app.a")
        frame.clear()

        assert frame.stack == []


class TestInjectorConfig:
    """Test cases for the InjectorConfig model."""

    def test_defaults(self):
        """Test the default notation."""
        config = InjectorConfig()

        assert config.raw_prefix == ":"
        assert config.method_separator == "::"
        assert config.parent_keyword == "parent"

    def test_custom_notation(self):
        """Test that notation can be customised."""
        config = InjectorConfig(raw_prefix="@", method_separator="->")

        assert config.raw_prefix == "@"
        assert config.method_separator == "->"

    def test_empty_values_are_rejected(self):
        """Test that blank notation is invalid."""
        with pytest.raises(ValidationError):
            InjectorConfig(raw_prefix="")

        with pytest.raises(ValidationError):
            InjectorConfig(method_separator="")

    def test_config_is_frozen(self):
        """Test that configuration cannot change after creation."""
        config = InjectorConfig()

        with pytest.raises(ValidationError):
            config.raw_prefix = "@"
