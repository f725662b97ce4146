"""Domain errors and failure typing."""


class PipelineError(Exception):
    """Base class for pipeline failures."""

    error_code = "PIPELINE_ERROR"


class ConfigError(PipelineError):
    """Raised for invalid or missing configuration."""

    error_code = "CONFIG_ERROR"


class FieldValidationError(PipelineError):
    """Raised when a raw value cannot be coerced into its domain type."""

    error_code = "FIELD_VALIDATION_ERROR"

    def __init__(self, entity_type: str, field: str, value: object) -> None:
        super().__init__(f"Cannot coerce {entity_type}.{field}: {value!r}")
        self.entity_type = entity_type
        self.field = field
        self.value = value


class ContractError(PipelineError):
    """Raised when strict output contracts are broken."""

    error_code = "CONTRACT_ERROR"


class StageError(PipelineError):
    """Raised for stage failures that abort the run."""

    error_code = "STAGE_ERROR"


class PublishError(StageError):
    """Raised when a built snapshot cannot be made current."""

    error_code = "PUBLISH_ERROR"
