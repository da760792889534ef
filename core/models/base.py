# =============================================================================
# core/models/base.py - Shared Model Configuration
# =============================================================================
# Every marketplace model speaks camelCase on the wire (logoUrl, developerId)
# while Python code and the database use snake_case.
# =============================================================================

from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, HttpUrl
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    """Timezone-aware current time used for createdAt/updatedAt."""
    return datetime.now(timezone.utc)


# An http(s) URL, validated by pydantic but stored and returned as a plain string
UrlStr = Annotated[HttpUrl, AfterValidator(str)]


class CamelModel(BaseModel):
    """
    Base model with camelCase aliases.

    Accepts both `logo_url` and `logoUrl` on input; FastAPI serializes
    responses by alias, so clients always see camelCase.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
