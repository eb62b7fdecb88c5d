"""Configuration models using Pydantic.

Configuration is resolved once at startup and is read-only afterwards. The
presence of each provider credential decides whether that provider is
available or the dispatcher has to fall back to local analysis.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, SecretStr

ProviderName = Literal["openai", "huggingface", "google", "local"]

DEFAULT_CAPTION_MODELS = [
    "Salesforce/blip-image-captioning-large",
    "Salesforce/blip-image-captioning-base",
    "nlpconnect/vit-gpt2-image-captioning",
]


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class OpenAIConfig(_FrozenModel):
    """Primary vision-capable LLM provider."""

    api_key: SecretStr | None = None
    model: str = "gpt-4o"
    timeout_seconds: float = 60.0
    max_tokens: int = 1000


class HuggingFaceConfig(_FrozenModel):
    """Hugging Face inference API provider.

    Caption models are tried in order until one returns usable text.
    """

    api_key: SecretStr | None = None
    base_url: str = "https://api-inference.huggingface.co/models"
    caption_models: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CAPTION_MODELS)
    )
    summarization_model: str = "facebook/bart-large-cnn"
    min_caption_length: int = 10
    summary_min_length: int = 30
    summary_max_length: int = 130
    timeout_seconds: float = 30.0


class GoogleVisionConfig(_FrozenModel):
    """Google Cloud Vision API provider."""

    api_key: SecretStr | None = None
    endpoint: str = "https://vision.googleapis.com/v1/images:annotate"
    max_results: int = 10
    timeout_seconds: float = 30.0


class AnalysisConfig(_FrozenModel):
    """Dispatcher and text budget settings."""

    default_provider: ProviderName = "openai"
    document_char_budget: int = 8000
    summarization_char_budget: int = 1000
    summary_sentences: int = 3
    # None = no cap on concurrent outgoing provider calls
    max_concurrent_requests: int | None = None


class FetchConfig(_FrozenModel):
    """Settings for fetching pages for URL summarization."""

    timeout_seconds: float = 15.0
    max_bytes: int = 2 * 1024 * 1024
    block_private_hosts: bool = True
    user_agent: str = "Mozilla/5.0 (compatible; AIPlayground/0.1)"


class ServerConfig(_FrozenModel):
    """Configuration for HTTP server."""

    host: str = "127.0.0.1"
    port: int = 3001
    max_upload_bytes: int = 10 * 1024 * 1024
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])


class PlaygroundConfig(_FrozenModel):
    """Root configuration model."""

    openai: OpenAIConfig = Field(default_factory=OpenAIConfig)
    huggingface: HuggingFaceConfig = Field(default_factory=HuggingFaceConfig)
    google: GoogleVisionConfig = Field(default_factory=GoogleVisionConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    def has_credentials(self, provider: str) -> bool:
        """Check whether a provider has a non-empty credential configured."""
        if provider == "local":
            return True
        section = getattr(self, provider, None)
        api_key = getattr(section, "api_key", None)
        if api_key is None:
            return False
        return bool(api_key.get_secret_value().strip())

    def credential_status(self) -> dict[str, bool]:
        """Credential presence for every remote provider."""
        return {
            name: self.has_credentials(name)
            for name in ("openai", "huggingface", "google")
        }
