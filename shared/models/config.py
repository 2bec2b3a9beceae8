from pydantic import BaseModel, Field

from shared.helper.HelperConfig import HelperConfig


class EnvConfig(BaseModel):
    """
    A single environment setting a client needs before it can be used.

    Attributes:
        env_key (str): The raw key, prefixed by the client with "<TYPE>_<ENGINE>_" (e.g. "BASE_URL" → "LLM_OLLAMA_BASE_URL").
        val_type (str): The expected value type. Supported types are "string", "number", "bool" and "list".
        default (str | int | bool | list | None): Fallback value. None marks the setting as required.
    """

    env_key: str
    val_type: str
    default: str | int | float | bool | list | None = None


class SearchThresholds(BaseModel):
    """
    Dissimilarity thresholds (0 = exact) used by the discovery components.

    Attributes:
        canonical (float): "Same real-world entity" checks: canonical dedup and categorical filter matching.
        options (float): Narrowing a filter's option list while the user types.
        documents (float): Exploratory full-document search.
    """

    canonical: float = Field(default=0.2, ge=0.0, le=1.0)
    options: float = Field(default=0.3, ge=0.0, le=1.0)
    documents: float = Field(default=0.4, ge=0.0, le=1.0)

    @classmethod
    def from_config(cls, helper_config: HelperConfig) -> "SearchThresholds":
        """Read SEARCH_THRESHOLD_* overrides from the environment."""
        return cls(
            canonical=helper_config.get_threshold_val("SEARCH_THRESHOLD_CANONICAL", default=0.2),
            options=helper_config.get_threshold_val("SEARCH_THRESHOLD_OPTIONS", default=0.3),
            documents=helper_config.get_threshold_val("SEARCH_THRESHOLD_DOCUMENTS", default=0.4),
        )
