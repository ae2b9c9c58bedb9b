"""
Configuration Settings.

Application configuration is loaded once at startup from environment
variables and an optional ``.env`` file through pydantic-settings.
"""

from typing import List, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# =====================================================================
# LLM Provider Configuration Models
# =====================================================================


class OpenAIConfig(BaseModel):
    """OpenAI API configuration."""

    api_key: Optional[str] = Field(default=None, alias="OPENAI_API_KEY")
    base_url: Optional[str] = Field(default=None, alias="OPENAI_BASE_URL")

    model_config = {"populate_by_name": True}


class AnthropicConfig(BaseModel):
    """Anthropic API configuration."""

    api_key: Optional[str] = Field(default=None, alias="ANTHROPIC_API_KEY")

    model_config = {"populate_by_name": True}


class GoogleConfig(BaseModel):
    """Google (Gemini) API configuration."""

    api_key: Optional[str] = Field(default=None, alias="GOOGLE_API_KEY")

    model_config = {"populate_by_name": True}


class OllamaConfig(BaseModel):
    """Local Ollama server configuration."""

    base_url: Optional[str] = Field(default=None, alias="OLLAMA_BASE_URL")

    model_config = {"populate_by_name": True}


class CORSConfig(BaseModel):
    """CORS middleware configuration."""

    origins: List[str] = Field(default=["*"], alias="CORS_ORIGINS")
    allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    allow_methods: List[str] = Field(default=["*"], alias="CORS_ALLOW_METHODS")
    allow_headers: List[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    model_config = {"populate_by_name": True}


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are bound from environment variables and the .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # =====================================================================
    # Server Configuration
    # =====================================================================
    server_host: str = Field(
        default="0.0.0.0",
        description="Server host address to bind to",
        alias="MODGATE_AI_SERVER_HOST",
    )
    server_port: int = Field(
        default=3000,
        description="Server port number",
        alias="MODGATE_AI_SERVER_PORT",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="MODGATE_AI_LOG_LEVEL",
    )

    # =====================================================================
    # Model Configuration
    # =====================================================================
    model: str = Field(
        default="openai:gpt-4o-mini",
        description="pydantic-ai model identifier, '<provider>:<model name>'",
        alias="MODGATE_AI_MODEL",
    )
    structured_calls: bool = Field(
        default=False,
        description="Let the model return structured invocation intents instead of directive text",
        alias="MODGATE_AI_STRUCTURED_CALLS",
    )

    # =====================================================================
    # Modules and Approval Configuration
    # =====================================================================
    trusted_modules: List[str] = Field(
        default=["list"],
        description="Module ids executed without human approval",
        alias="MODGATE_AI_TRUSTED_MODULES",
    )
    approval_ttl_seconds: float = Field(
        default=900.0,
        gt=0.0,
        le=86400.0,
        description="Lifetime of a pending invocation awaiting approval",
        alias="MODGATE_AI_APPROVAL_TTL_SECONDS",
    )
    max_chain_depth: int = Field(
        default=8,
        ge=1,
        description="Maximum number of chained tool calls per user request",
        alias="MODGATE_AI_MAX_CHAIN_DEPTH",
    )
    modules_dir: Optional[str] = Field(
        default=None,
        description="Extra directory scanned for plugin files",
        alias="MODGATE_AI_MODULES_DIR",
    )
    sweep_interval_seconds: float = Field(
        default=60.0,
        gt=0.0,
        description="Interval of the expired pending invocation sweeper",
        alias="MODGATE_AI_SWEEP_INTERVAL_SECONDS",
    )

    # =====================================================================
    # Provider credentials (consumed by pydantic-ai from the environment)
    # =====================================================================
    openai_api_key: Optional[str] = Field(default=None, alias="OPENAI_API_KEY")
    openai_base_url: Optional[str] = Field(default=None, alias="OPENAI_BASE_URL")
    anthropic_api_key: Optional[str] = Field(default=None, alias="ANTHROPIC_API_KEY")
    google_api_key: Optional[str] = Field(default=None, alias="GOOGLE_API_KEY")
    ollama_base_url: Optional[str] = Field(default=None, alias="OLLAMA_BASE_URL")

    # =====================================================================
    # CORS
    # =====================================================================
    cors_origins: List[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: List[str] = Field(default=["*"], alias="CORS_ALLOW_METHODS")
    cors_allow_headers: List[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    # =====================================================================
    # Computed Properties (Grouped Configurations)
    # =====================================================================

    @property
    def openai(self) -> OpenAIConfig:
        """Get OpenAI configuration from environment variables."""
        return OpenAIConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def anthropic(self) -> AnthropicConfig:
        """Get Anthropic configuration from environment variables."""
        return AnthropicConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def google(self) -> GoogleConfig:
        """Get Google configuration from environment variables."""
        return GoogleConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def ollama(self) -> OllamaConfig:
        """Get Ollama configuration from environment variables."""
        return OllamaConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def cors(self) -> CORSConfig:
        """Get CORS configuration from environment variables."""
        return CORSConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def model_provider(self) -> str:
        """Provider prefix of ``model`` (``openai`` for ``openai:gpt-4o-mini``)."""
        return self.model.split(":", 1)[0] if ":" in self.model else "openai"

    def provider_configured(self) -> bool:
        """Whether credentials (or a base URL) exist for the selected provider."""
        provider = self.model_provider
        if provider == "openai":
            return bool(self.openai.api_key)
        if provider == "anthropic":
            return bool(self.anthropic.api_key)
        if provider in ("google-gla", "google-vertex", "gemini"):
            return bool(self.google.api_key)
        if provider == "ollama":
            return bool(self.ollama.base_url)
        return True


settings = Settings()
