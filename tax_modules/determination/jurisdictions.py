"""
Jurisdiction directory -- special-territory membership and scope hints.

``StaticJurisdictionDirectory`` answers from ``DeterminationConfig``;
``SqlJurisdictionDirectory`` answers from the ``tax_jurisdictions`` table.
"""

from typing import Protocol

from sqlalchemy import select

from tax_kernel.selectors.base import BaseSelector
from tax_modules.determination.config import DeterminationConfig
from tax_modules.determination.orm import JurisdictionModel


class JurisdictionDirectory(Protocol):
    def is_special_territory(self, jurisdiction_code: str) -> bool: ...

    def scope_for(self, jurisdiction_code: str) -> str: ...


class StaticJurisdictionDirectory:
    """Directory backed by the module configuration."""

    def __init__(self, config: DeterminationConfig):
        self._config = config

    def is_special_territory(self, jurisdiction_code: str) -> bool:
        return jurisdiction_code.strip().upper() in self._config.special_territories

    def scope_for(self, jurisdiction_code: str) -> str:
        """The jurisdiction's zone, else the jurisdiction code itself."""
        return self._config.zone_for(jurisdiction_code) or jurisdiction_code.strip().upper()


class SqlJurisdictionDirectory(BaseSelector):
    """Directory backed by active ``JurisdictionModel`` rows."""

    def _find(self, jurisdiction_code: str) -> JurisdictionModel | None:
        return self.session.execute(
            select(JurisdictionModel)
            .where(JurisdictionModel.code == jurisdiction_code.strip().upper())
            .where(JurisdictionModel.is_active.is_(True))
        ).scalars().first()

    def is_special_territory(self, jurisdiction_code: str) -> bool:
        row = self._find(jurisdiction_code)
        return row is not None and row.is_special_territory

    def scope_for(self, jurisdiction_code: str) -> str:
        row = self._find(jurisdiction_code)
        if row is not None and row.zone:
            return row.zone.upper()
        return jurisdiction_code.strip().upper()
