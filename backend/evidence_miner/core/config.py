from pathlib import Path
from typing import Optional
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[3] / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    project_name: str = "Evidence Miner"

    openai_api_key: SecretStr = Field(description="OpenAI API key for LLM calls")
    analysis_model: str = "gpt-4o-mini"
    synthesis_model: str = "gpt-4o"
    report_language: str = Field(
        default="Japanese",
        description="Language used for translated titles and the final report"
    )

    # API contact email sent to NCBI as required by the E-utilities usage policy
    api_contact_email: str = Field(
        default="researcher@example.com",
        description="Email for API contact (update with your real email)"
    )
    ncbi_api_key: Optional[SecretStr] = Field(default=None, description="Raises NCBI limit from 3 to 10 req/s")
    ncbi_tool: str = "evidence-miner"
    eutils_base_url: str = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils"

    http_timeout_seconds: float = 15.0
    fetch_max_retries: int = Field(default=3, ge=0)
    fetch_backoff_seconds: float = Field(default=1.0, ge=0.0)

    search_max_results: int = Field(default=30, ge=1, le=10000)
    references_per_source: int = Field(default=3, ge=1)
    max_reference_documents: int = Field(default=8, ge=0)
    fulltext_max_chars: int = Field(default=10000, ge=1)
    fulltext_concurrency: int = Field(default=1, ge=1)
    review_deadline_seconds: float = Field(default=300.0, gt=0)

    rate_limit_enabled: bool = True
    rate_limit_storage_uri: str = "memory://"

    log_level: str = "INFO"

    @property
    def API_CONTACT_EMAIL(self) -> str:
        return self.api_contact_email

    @property
    def OPENAI_API_KEY(self) -> str:
        return self.openai_api_key.get_secret_value()

    @property
    def NCBI_API_KEY(self) -> Optional[str]:
        if self.ncbi_api_key:
            return self.ncbi_api_key.get_secret_value()
        return None

    @property
    def PROJECT_NAME(self) -> str:
        return self.project_name

    @property
    def EUTILS_BASE_URL(self) -> str:
        return self.eutils_base_url.rstrip("/")

    @property
    def LOG_LEVEL(self) -> str:
        return self.log_level


settings = Settings()
