import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    APP_ENV = os.getenv("APP_ENV", "development")
    LOG_DIR = os.getenv("LOG_DIR", "./logs/")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    EXA_API_KEY = os.getenv("EXA_API_KEY")
    EXA_BASE_URL = os.getenv("EXA_BASE_URL", "https://api.exa.ai")
    COURTLISTENER_API_TOKEN = os.getenv("COURTLISTENER_API_TOKEN")
    COURTLISTENER_BASE_URL = os.getenv(
        "COURTLISTENER_BASE_URL", "https://www.courtlistener.com")

    PROVIDER_TIMEOUT_SECONDS = float(os.getenv("PROVIDER_TIMEOUT_SECONDS", 20))
    ENRICHMENT_BUDGET_SECONDS = float(
        os.getenv("ENRICHMENT_BUDGET_SECONDS", 25))

    # "score" re-ranks candidates, "provider" keeps the search provider's order
    RANKING_MODE = os.getenv("RANKING_MODE", "score")
    # "auto" | "highlights" | "paragraphs"
    SNIPPET_STRATEGY = os.getenv("SNIPPET_STRATEGY", "auto")
    MAX_RESULTS = int(os.getenv("MAX_RESULTS", 3))

    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")
    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", 8000))

    @classmethod
    def is_production(cls) -> bool:
        return cls.APP_ENV.lower() == "production"
