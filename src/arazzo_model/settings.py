"""Parser runtime settings."""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from arazzo_model.models import SettingsModel


class ParserSettings(SettingsModel):
    """Parser configuration resolved from the environment.

    Every field can be set with an `ARAZZO_`-prefixed environment
    variable, for example `ARAZZO_STRICT=false`. Explicit parser
    arguments take precedence over the environment.
    """

    model_config = SettingsConfigDict(
        env_prefix='ARAZZO_',
    )

    strict: bool = Field(
        default=True,
        title='Strict reference checks',
        description=(
            'Report unresolved references as validation issues. '
            'When disabled, they are emitted as warnings and the '
            'description is returned.'
        ),
    )

    max_depth: int = Field(
        default=128,
        ge=1,
        title='Maximum nesting depth',
        description=(
            'Maximum nesting depth of the raw document. '
            'Deeper documents are rejected before validation.'
        ),
    )
