"""Instance-level module gate."""

from typing import TYPE_CHECKING

from marketplace.models.errors import ErrorCode, ReservationError

if TYPE_CHECKING:
    from .repository import ReservationRepository

RESOURCES_MODULE = "module.resources"


class ModulesService:
    """Checks feature modules against the instance settings."""

    def __init__(self, repository: "ReservationRepository") -> None:
        self.repository = repository

    def is_enabled(self, module_key: str) -> bool:
        return self.repository.get_instance_settings().is_module_enabled(module_key)

    def assert_module_enabled(self, module_key: str) -> None:
        """Raise MODULE_DISABLED unless ``module_key`` is enabled."""
        if not self.is_enabled(module_key):
            raise ReservationError(
                ErrorCode.MODULE_DISABLED,
                details={"module": module_key},
            )
