import os
import nltk
import uvicorn
from common.config import Config
from common.logging import logger


def initialize_app():
    """Initialize the application with necessary setup"""
    os.makedirs(Config.LOG_DIR, exist_ok=True)

    # Initialize NLTK data
    try:
        nltk.data.find('corpora/stopwords')
    except LookupError:
        nltk.download('stopwords', quiet=True)


def run_service(app_module: str, port: int, service_name: str):
    """Run a uvicorn service"""
    logger.info(f"Starting {service_name} on {Config.HOST}:{port}")
    uvicorn.run(app_module, host=Config.HOST, port=port,
                log_level=Config.LOG_LEVEL.lower())


def main():
    initialize_app()
    run_service("agents.evidence_finder.main:app", Config.PORT, "Evidence Case Finder")


if __name__ == "__main__":
    main()
