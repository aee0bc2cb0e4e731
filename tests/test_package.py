"""Basic package tests to verify installation."""


def test_package_imports() -> None:
    """Verify the main package can be imported."""
    import hauspreis

    assert hauspreis.__version__


def test_config_module_imports() -> None:
    """Verify config module structure is correct."""
    from hauspreis.config import (
        CrossValidationConfig,
        DataConfig,
        MethodsConfig,
        OutputConfig,
        ProjectConfig,
        load_config,
    )

    # Verify all exports are available
    assert ProjectConfig is not None
    assert DataConfig is not None
    assert CrossValidationConfig is not None
    assert MethodsConfig is not None
    assert OutputConfig is not None
    assert load_config is not None


def test_schemas_module_imports() -> None:
    """Verify schemas module structure is correct."""
    from hauspreis.schemas import ComparisonSchema, CVResultsSchema, build_housing_schema

    assert ComparisonSchema is not None
    assert CVResultsSchema is not None
    assert build_housing_schema is not None


def test_modeling_module_imports() -> None:
    """Verify modeling exports cover all eight methods."""
    from hauspreis.modeling import METHOD_REGISTRY, MethodKind, ModelTrainer

    assert ModelTrainer is not None
    assert len(MethodKind) == 8
    assert set(METHOD_REGISTRY) == set(MethodKind)
