"""
Configuration Resolver -- the single tax configuration governing a line.

Resolution checks prerequisites in order and fails on the first miss:

    1. classification code valid on the date  -> ClassificationCodeNotFoundError
    2. business type active                   -> BusinessTypeNotFoundError
    3. effective configuration                -> ConfigurationNotFoundError

No default rate is ever substituted for a missing configuration.
"""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from tax_kernel.domain.rate_table import TaxConfiguration
from tax_kernel.domain.types import BusinessType
from tax_kernel.exceptions import (
    BusinessTypeNotFoundError,
    ClassificationCodeNotFoundError,
    ConfigurationNotFoundError,
)
from tax_kernel.logging_config import get_logger
from tax_modules.determination.models import BusinessTypeProfile, ClassificationCode
from tax_modules.determination.stores import (
    BusinessTypeStore,
    ClassificationCodeStore,
    TaxConfigurationStore,
)

logger = get_logger("modules.determination.resolver")


@dataclass(frozen=True)
class ResolvedConfiguration:
    """Everything resolution established for one line."""
    classification: ClassificationCode
    business_type_profile: BusinessTypeProfile
    configuration: TaxConfiguration


class ConfigurationResolver:
    """Resolve classification code, business type, and configuration through the stores."""

    def __init__(
        self,
        classification_codes: ClassificationCodeStore,
        business_types: BusinessTypeStore,
        configurations: TaxConfigurationStore,
    ):
        self._classification_codes = classification_codes
        self._business_types = business_types
        self._configurations = configurations

    def resolve(
        self,
        *,
        tenant_id: UUID,
        classification_code: str,
        business_type: BusinessType,
        jurisdiction_scope: str | None,
        effective_date: date,
    ) -> ResolvedConfiguration:
        """
        Resolve the configuration for one line.

        Raises:
            ClassificationCodeNotFoundError: code unknown or not valid on the date.
            BusinessTypeNotFoundError: business type absent or inactive.
            ConfigurationNotFoundError: no configuration effective for the inputs.
        """
        classification = self._classification_codes.find_by_code_valid_for_date(
            tenant_id, classification_code, effective_date,
        )
        if classification is None:
            logger.warning("classification_code_not_found", extra={
                "classification_code": classification_code,
                "effective_date": effective_date.isoformat(),
            })
            raise ClassificationCodeNotFoundError(classification_code, effective_date)

        profile = self._business_types.find_active_by_type(tenant_id, business_type)
        if profile is None:
            logger.warning("business_type_not_found", extra={
                "business_type": business_type.value,
            })
            raise BusinessTypeNotFoundError(business_type.value)

        configuration = self._configurations.find_effective(
            tenant_id, classification_code, business_type, jurisdiction_scope, effective_date,
        )
        if configuration is None:
            logger.warning("tax_configuration_not_found", extra={
                "classification_code": classification_code,
                "business_type": business_type.value,
                "jurisdiction_scope": jurisdiction_scope,
                "effective_date": effective_date.isoformat(),
            })
            raise ConfigurationNotFoundError(
                classification_code, business_type.value, jurisdiction_scope, effective_date,
            )

        logger.debug("tax_configuration_resolved", extra={
            "classification_code": classification_code,
            "business_type": business_type.value,
            "configuration_id": str(configuration.id) if configuration.id else None,
            "configuration_scope": configuration.jurisdiction_scope,
            "effective_from": configuration.effective_from.isoformat(),
        })
        return ResolvedConfiguration(
            classification=classification,
            business_type_profile=profile,
            configuration=configuration,
        )
