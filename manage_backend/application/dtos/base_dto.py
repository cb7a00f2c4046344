# manage_backend/application/dtos/base_dto.py

"""
Base class for custom DTOs.

Extends the Pydantic BaseModel with behaviour shared by every DTO of the
application.
"""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict


class CustomBaseModel(BaseModel):
    """
    Base model for all DTOs of the application.

    Adds ``changes()``, the set of fields a caller actually supplied, with
    ``None`` values filtered out. Update use cases apply exactly this dict.
    """

    model_config = ConfigDict(from_attributes=True)

    def changes(self) -> Dict[str, Any]:
        """
        Return the explicitly set, non-None fields.

        Returns:
            Dict[str, Any]: field name to value, excluding unset and None values
        """
        return self.model_dump(exclude_unset=True, exclude_none=True)
