import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


# Environment variables for ProcessedOrNot Scanner API
PORT = int(os.getenv("PORT", 8000))

# API keys and model names for different LLMs here
# for google ai studio, analysis degrades to placeholder text when unset
LLM_API_KEY = os.getenv("LLM_API_KEY", None)
LLM_MODEL_NAME = os.getenv("LLM_MODEL_NAME", "gemini-2.0-flash")
LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", 0.3))

# Provider keys, providers without a key log and skip themselves
USDA_API_KEY = os.getenv("USDA_API_KEY", "DEMO_KEY")
# FoodData Central mirror only runs with an explicitly configured USDA key
FOODDATA_CENTRAL_API_KEY = os.getenv("USDA_API_KEY", None)
BARCODE_SPIDER_API_KEY = os.getenv("BARCODE_SPIDER_API_KEY", None)
EAN_SEARCH_API_KEY = os.getenv("EAN_SEARCH_API_KEY", None)
PRODUCT_API_KEY = os.getenv("PRODUCT_API_KEY", None)

# sqlalchemy db url
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./processed_or_not.db")

# langsmith keys optional
LANGSMITH_TRACING = os.getenv("LANGSMITH_TRACING", "false")
LANGSMITH_ENDPOINT = os.getenv("LANGSMITH_ENDPOINT", "https://api.smith.langchain.com")
LANGSMITH_API_KEY = os.getenv("LANGSMITH_API_KEY", None)
LANGSMITH_PROJECT = os.getenv("LANGSMITH_PROJECT", None)

# app settings
# Total seconds allowed for one provider request
PROVIDER_TIMEOUT = int(os.getenv("PROVIDER_TIMEOUT", 10))
# Append the regional composition databases to the end of the barcode cascade
ENABLE_REGIONAL_PROVIDERS = os.getenv("ENABLE_REGIONAL_PROVIDERS", "false") == "true"
USER_AGENT = os.getenv("USER_AGENT", "ProcessedOrNot-Scanner/1.0")

# Scan progress entries expire after this many seconds
PROGRESS_TTL_SECONDS = int(os.getenv("PROGRESS_TTL_SECONDS", 300))
PROGRESS_MAX_ENTRIES = int(os.getenv("PROGRESS_MAX_ENTRIES", 1000))

# Define Required Environment Variables and show error if not set
required_env_vars = {
    "DATABASE_URL":DATABASE_URL,
    "LLM_MODEL_NAME":LLM_MODEL_NAME,
}

# Check if all required environment variables are set, an empty value counts as unset
def check_required_env_vars(env_vars: dict):
    for var, value in env_vars.items():
        if value is None or not str(value).strip():
            raise ValueError(f"Environment variable {var} is not set. Please set it in the .env file.")


check_required_env_vars(required_env_vars)
