from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Recipe RAG Engine"
    environment: str = "development"
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"

    # Generation backend: "ollama" or "openai"
    llm_backend: str = "ollama"
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    ollama_host: str = "http://localhost:11434"
    ollama_model: str = "gemma2:2b"

    # ChromaDB recipe collection
    chroma_persist_directory: str | None = None  # In-memory client if None
    chroma_collection: str = "recipes"

    # Retrieval
    default_max_results: int = 10
    personalization_multiplier: float = 0.8  # Score multiplier for personalized hits
    expansion_multiplier: float = 0.6  # Score multiplier for expanded-query hits
    expansion_max_tokens: int = 100
    expansion_temperature: float = 0.5

    # Re-ranking fusion (relevance vs personalized score)
    fusion_relevance_weight: float = 0.6
    fusion_personalization_weight: float = 0.4

    # Context packing
    context_budget_chars: int = 4000
    context_ingredient_limit: int = 5
    quality_relevance_weight: float = 0.5
    quality_diversity_weight: float = 0.2
    quality_threshold_weight: float = 0.3
    quality_relevance_threshold: float = 0.7

    # Generation
    analysis_temperature: float = 0.3
    analysis_max_tokens: int = 500
    generation_temperature: float = 0.7
    regeneration_temperature: float = 0.6
    generation_max_tokens: int = 1500
    quality_gate_threshold: float = 0.7  # Below this the answer is regenerated once
    response_language: str = "English"

    # Timeouts (seconds)
    retrieval_timeout_s: float = 8.0
    personalization_timeout_s: float = 5.0
    expansion_timeout_s: float = 10.0
    generation_timeout_s: float = 60.0

    # Conversation history
    history_max_sessions: int = 1000
    history_max_turns: int = 20
    history_ttl_s: float = 3600.0
    prompt_history_turns: int = 5
    prompt_history_chars: int = 300

    class Config:
        env_file = ".env"
        extra = "ignore"  # Ignore extra environment variables that aren't in the Settings class


settings = Settings()
