"""Unit tests for domain models."""

import pytest
from pydantic import ValidationError

from scopewire.domain.enums import Lifetime, ProviderKind
from scopewire.domain.models import ContainerOptions, Registration, ServiceKey


class Service:
    pass


class TestServiceKey:
    """Test cases for the ServiceKey model."""

    def test_service_key_defaults_to_unnamed(self):
        """Test that the key defaults to None."""
        service = ServiceKey(contract=Service)
        assert service.contract is Service
        assert service.key is None

    def test_service_keys_with_same_fields_are_equal(self):
        """Test equality and hashing by value."""
        assert ServiceKey(contract=Service) == ServiceKey(contract=Service)
        assert hash(ServiceKey(contract=Service, key="a")) == hash(ServiceKey(contract=Service, key="a"))

    def test_named_and_unnamed_keys_differ(self):
        """Test that a key distinguishes service keys."""
        assert ServiceKey(contract=Service) != ServiceKey(contract=Service, key="a")
        assert len({ServiceKey(contract=Service), ServiceKey(contract=Service, key="a")}) == 2

    def test_service_key_str(self):
        """Test string rendering."""
        assert str(ServiceKey(contract=Service)) == "Service"
        assert str(ServiceKey(contract=Service, key="main")) == "Service['main']"

    def test_service_key_is_frozen(self):
        """Test that service keys are immutable."""
        service = ServiceKey(contract=Service)
        with pytest.raises(ValidationError):
            service.key = "other"


class TestRegistration:
    """Test cases for the Registration model."""

    def test_type_registration(self):
        """Test creating a registration for an implementation class."""
        registration = Registration(
            registration_id=0,
            service=ServiceKey(contract=Service),
            lifetime=Lifetime.TRANSIENT,
            kind=ProviderKind.TYPE,
            implementation=Service,
        )
        assert registration.contract is Service
        assert registration.implementation is Service
        assert registration.externally_owned is False

    def test_instance_registration(self):
        """Test creating a registration for a pre-built instance."""
        instance = Service()
        registration = Registration(
            registration_id=1,
            service=ServiceKey(contract=Service),
            lifetime=Lifetime.INSTANCE,
            kind=ProviderKind.INSTANCE,
            instance=instance,
        )
        assert registration.instance is instance

    def test_factory_is_stored_as_is(self):
        """Test that the factory callable is not wrapped."""

        def factory(scope):
            return Service()

        registration = Registration(
            registration_id=2,
            service=ServiceKey(contract=Service),
            lifetime=Lifetime.SINGLETON,
            kind=ProviderKind.FACTORY,
            factory=factory,
        )
        assert registration.factory is factory

    def test_missing_provider_raises(self):
        """Test that a TYPE registration requires an implementation."""
        with pytest.raises(ValidationError):
            Registration(
                registration_id=0,
                service=ServiceKey(contract=Service),
                lifetime=Lifetime.TRANSIENT,
                kind=ProviderKind.TYPE,
            )

    def test_instance_kind_requires_instance_lifetime(self):
        """Test that instance providers cannot be transient."""
        with pytest.raises(ValidationError):
            Registration(
                registration_id=0,
                service=ServiceKey(contract=Service),
                lifetime=Lifetime.TRANSIENT,
                kind=ProviderKind.INSTANCE,
                instance=Service(),
            )

    def test_negative_id_rejected(self):
        """Test that registration ids are non-negative."""
        with pytest.raises(ValidationError):
            Registration(
                registration_id=-1,
                service=ServiceKey(contract=Service),
                lifetime=Lifetime.TRANSIENT,
                kind=ProviderKind.TYPE,
                implementation=Service,
            )

    def test_registration_is_frozen(self):
        """Test that registrations are immutable."""
        registration = Registration(
            registration_id=0,
            service=ServiceKey(contract=Service),
            lifetime=Lifetime.TRANSIENT,
            kind=ProviderKind.TYPE,
            implementation=Service,
        )
        with pytest.raises(ValidationError):
            registration.lifetime = Lifetime.SINGLETON


class TestContainerOptions:
    """Test cases for the ContainerOptions model."""

    def test_defaults(self):
        """Test that auto-wiring is opt-in and transient tracking is on."""
        options = ContainerOptions()
        assert options.auto_wire is False
        assert options.track_transient_disposables is True

    def test_unknown_option_rejected(self):
        """Test that misspelled options are rejected."""
        with pytest.raises(ValidationError):
            ContainerOptions(auto_wiring=True)
