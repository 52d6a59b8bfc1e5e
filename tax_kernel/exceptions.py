"""
Typed Exception Hierarchy for the Tax Determination Engine.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

A tax engine that answers "which rate applies?" must fail loudly and
precisely.  Callers (HTTP controllers, batch jobs) map failures to user
messages such as "no tax rule configured for this item as of this date",
and they must be able to do so without parsing message strings.

Every exception:
  1. Has a TYPED class (catch by type, not message)
  2. Has a CODE class attribute (machine-readable, API-safe)
  3. Carries structured DATA as attributes (not just a message string)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    TaxEngineError (base)
    |
    +-- ValidationError
    |   +-- InvalidAmountError
    |   +-- InvalidQuantityError
    |
    +-- NotFoundError
        +-- ClassificationCodeNotFoundError
        +-- BusinessTypeNotFoundError
        +-- ConfigurationNotFoundError

There is no transient/retryable category.  Retry policy, if any, belongs to
the store collaborators.

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category    | Code                           | When Raised
------------|--------------------------------|--------------------------------------
Validation  | INVALID_AMOUNT                 | Base amount missing, non-numeric, <= 0
            | INVALID_QUANTITY               | Quantity not a positive integer
------------|--------------------------------|--------------------------------------
Not found   | CLASSIFICATION_CODE_NOT_FOUND  | Code unknown or not valid on the date
            | BUSINESS_TYPE_NOT_FOUND        | Business type absent or inactive
            | CONFIGURATION_NOT_FOUND        | No effective tax rule for the inputs

===============================================================================
HANDLING PATTERNS
===============================================================================

    try:
        result = service.calculate("1001", Decimal("1000.00"), tenant_id=tenant)
    except ConfigurationNotFoundError as e:
        return {"error": e.code, "code": e.classification_code}, 404
    except ValidationError as e:
        return {"error": e.code, "message": str(e)}, 422

Never substitute a default rate on ConfigurationNotFoundError: silently
picking a rate could misstate a legal tax liability.
"""

from datetime import date


class TaxEngineError(Exception):
    """
    Base exception for all tax engine errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "TAX_ENGINE_ERROR"


# Validation exceptions


class ValidationError(TaxEngineError):
    """Caller supplied malformed input."""

    code: str = "VALIDATION_ERROR"


class InvalidAmountError(ValidationError):
    """Base amount is not a positive decimal."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, amount: object, reason: str = "must be greater than zero"):
        self.amount = str(amount)
        self.reason = reason
        super().__init__(f"Base amount {amount!r} {reason}")


class InvalidQuantityError(ValidationError):
    """Quantity is not a positive integer."""

    code: str = "INVALID_QUANTITY"

    def __init__(self, quantity: object, reason: str = "must be greater than zero"):
        self.quantity = str(quantity)
        self.reason = reason
        super().__init__(f"Quantity {quantity!r} {reason}")


# Not-found exceptions


class NotFoundError(TaxEngineError):
    """No applicable rule or reference record exists for the given inputs."""

    code: str = "NOT_FOUND"


class ClassificationCodeNotFoundError(NotFoundError):
    """Classification code is unknown or not valid on the effective date."""

    code: str = "CLASSIFICATION_CODE_NOT_FOUND"

    def __init__(self, classification_code: str, effective_date: date):
        self.classification_code = classification_code
        self.effective_date = effective_date
        super().__init__(
            f"Classification code {classification_code} not found "
            f"or not valid for date {effective_date.isoformat()}"
        )


class BusinessTypeNotFoundError(NotFoundError):
    """Business type profile is absent or inactive."""

    code: str = "BUSINESS_TYPE_NOT_FOUND"

    def __init__(self, business_type: str):
        self.business_type = business_type
        super().__init__(f"Business type {business_type} not found")


class ConfigurationNotFoundError(NotFoundError):
    """No tax configuration is effective for the given inputs and date."""

    code: str = "CONFIGURATION_NOT_FOUND"

    def __init__(
        self,
        classification_code: str,
        business_type: str,
        jurisdiction_scope: str | None,
        effective_date: date,
    ):
        self.classification_code = classification_code
        self.business_type = business_type
        self.jurisdiction_scope = jurisdiction_scope
        self.effective_date = effective_date
        scope = f" in scope {jurisdiction_scope}" if jurisdiction_scope else ""
        super().__init__(
            f"No tax configuration found for classification code "
            f"{classification_code} and business type {business_type}{scope} "
            f"as of {effective_date.isoformat()}"
        )
