"""Exception hierarchy for the core.

Wizard errors carry an i18n key (``message_key``) so the UI can show a
French notice without parsing exception text.
"""

from __future__ import annotations


class FleetDeskError(Exception):
    """Base class for all FleetDesk errors."""


class ImportWizardError(FleetDeskError):
    message_key: str = "import.error.generic"

    def __init__(self, detail: str = "") -> None:
        super().__init__(detail or self.message_key)
        self.detail = detail


class ParseError(ImportWizardError):
    """The uploaded file could not be read or has no header/data rows."""

    message_key = "import.error.parse"


class RequiredFieldsError(ImportWizardError):
    """A required field has no mapped column."""

    message_key = "import.error.required"

    def __init__(self, missing: list[str]) -> None:
        super().__init__(", ".join(missing))
        self.missing = missing


class EmptyImportError(ImportWizardError):
    """No row survived the transform; nothing to confirm."""

    message_key = "import.error.no_rows"


class WizardStateError(ImportWizardError):
    """An operation was called from the wrong wizard step."""

    message_key = "import.error.state"


class OptimisticUpdateError(FleetDeskError):
    """The remote operation failed and the optimistic change was rolled back."""
