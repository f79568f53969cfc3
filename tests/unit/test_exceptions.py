from serviceforms.exceptions import (
    PackageError,
    ServiceNotFoundError,
    SettingsError,
    SpecificationError,
)


def test_root_exception_hierarchy() -> None:
    assert issubclass(SettingsError, PackageError)
    assert issubclass(SpecificationError, PackageError)
    assert issubclass(ServiceNotFoundError, PackageError)


def test_settings_error_includes_cause() -> None:
    assert str(SettingsError()) == "Failed to load settings"
    assert str(SettingsError(exc=ValueError("boom"))) == "Failed to load settings: boom"


def test_specification_error_message_and_source() -> None:
    error = SpecificationError(
        message="Failed to load OpenAPI specification (status 500)",
        source="https://specs.example.test",
    )
    assert str(error) == "Failed to load OpenAPI specification (status 500)"
    assert error.source == "https://specs.example.test"


def test_service_not_found_error_lists_available_slugs() -> None:
    error = ServiceNotFoundError(slug="x", available=["a", "b"])
    assert str(error) == "Unknown service 'x' (available: a, b)"
    assert str(ServiceNotFoundError(slug="x", available=[])) == "Unknown service 'x' (available: none)"
