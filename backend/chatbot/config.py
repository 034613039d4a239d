from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

PLACEHOLDER_VALUES = {
    "",
    "placeholder",
    "your-api-key-here",
    "your_gemini_api_key_here",
}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Service
    service_name: str = "whatsapp-ai-chatbot"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3000

    # LLM - Multi-provider support (google, groq, openai)
    llm_provider: str = "google"
    llm_api_key: str = ""
    llm_chat_model: str = "gemini-1.5-flash"
    llm_temperature: float = 0.7
    llm_top_p: float = 0.8
    llm_top_k: int = 40
    llm_max_output_tokens: int = 1024
    llm_timeout_seconds: float = 30.0

    # Backend error markers, checked in order credentials > quota > safety
    llm_credential_markers: list[str] = ["API_KEY"]
    llm_quota_markers: list[str] = ["QUOTA_EXCEEDED"]
    llm_safety_markers: list[str] = ["SAFETY"]

    # Conversation memory
    context_max_history: int = 10
    context_window: int = 5

    # Twilio (WhatsApp)
    twilio_account_sid: str = ""
    twilio_auth_token: str = ""
    twilio_whatsapp_number: str = ""

    @property
    def llm_configured(self) -> bool:
        return self.llm_api_key.strip() not in PLACEHOLDER_VALUES

    @property
    def twilio_configured(self) -> bool:
        return (
            self.twilio_account_sid not in PLACEHOLDER_VALUES
            and self.twilio_auth_token not in PLACEHOLDER_VALUES
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
