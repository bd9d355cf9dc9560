"""Unit tests for domain exceptions."""

import pytest

from scopewire.domain.exceptions import (
    CircularDependencyError,
    ConfigurationError,
    DIException,
    DisposalError,
    ScopeError,
    UnresolvedContractError,
)


class ServiceA:
    pass


class ServiceB:
    pass


class TestDIException:
    """Test cases for the base DIException class."""

    def test_di_exception_is_exception(self):
        """Test that DIException inherits from Exception."""
        assert issubclass(DIException, Exception)

    @pytest.mark.parametrize(
        "exception_type",
        [ConfigurationError, CircularDependencyError, UnresolvedContractError, ScopeError, DisposalError],
    )
    def test_all_errors_inherit_from_di_exception(self, exception_type):
        """Test that every container error derives from DIException."""
        assert issubclass(exception_type, DIException)


class TestConfigurationError:
    """Test cases for the ConfigurationError class."""

    def test_configuration_error_message(self):
        """Test that the message is preserved."""
        error = ConfigurationError("bad registration")
        assert str(error) == "bad registration"
        assert error.contract is None

    def test_configuration_error_with_contract(self):
        """Test that the contract is stored."""
        error = ConfigurationError("bad registration", ServiceA)
        assert error.contract is ServiceA


class TestCircularDependencyError:
    """Test cases for the CircularDependencyError class."""

    def test_circular_dependency_error_is_configuration_error(self):
        """Test that cycles are configuration errors."""
        assert issubclass(CircularDependencyError, ConfigurationError)

    def test_circular_dependency_error_message(self):
        """Test that the chain is rendered in the message."""
        error = CircularDependencyError([ServiceA, ServiceB, ServiceA])
        assert str(error) == "Circular dependency detected: ServiceA -> ServiceB -> ServiceA"
        assert error.dependency_chain == [ServiceA, ServiceB, ServiceA]
        assert error.contract is ServiceA

    def test_circular_dependency_error_self_reference(self):
        """Test a contract depending on itself."""
        error = CircularDependencyError([ServiceA, ServiceA])
        assert "ServiceA -> ServiceA" in str(error)


class TestUnresolvedContractError:
    """Test cases for the UnresolvedContractError class."""

    def test_unresolved_contract_error_basic(self):
        """Test the message without reason or key."""
        error = UnresolvedContractError(ServiceA)
        assert str(error) == "Cannot resolve contract: ServiceA"
        assert error.contract is ServiceA
        assert error.key is None
        assert error.reason is None

    def test_unresolved_contract_error_with_reason(self):
        """Test that the reason is appended."""
        error = UnresolvedContractError(ServiceA, "no registration found")
        assert str(error) == "Cannot resolve contract: ServiceA. Reason: no registration found"

    def test_unresolved_contract_error_with_key(self):
        """Test that the key appears in the message."""
        error = UnresolvedContractError(ServiceA, "no registration found for key", key="primary")
        assert "'primary'" in str(error)
        assert error.key == "primary"

    def test_unresolved_contract_error_with_non_type_contract(self):
        """Test that non-type contracts are rendered with repr."""
        error = UnresolvedContractError("service")
        assert "'service'" in str(error)


class TestDisposalError:
    """Test cases for the DisposalError class."""

    def test_disposal_error_collects_errors(self):
        """Test that every failure is kept and summarized."""
        errors = [RuntimeError("first"), ValueError("second")]
        error = DisposalError(errors)
        assert error.errors == errors
        assert str(error).startswith("2 instance(s) failed to dispose")
        assert "RuntimeError: first" in str(error)
        assert "ValueError: second" in str(error)
