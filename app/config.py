import os
from dotenv import load_dotenv

load_dotenv()

# --------------------------------------------------
# App
# --------------------------------------------------
APP_NAME = "Repository Chat API"
API_PREFIX = os.getenv("API_PREFIX", "/api")

ENV = os.getenv("ENV", "local")  # local | production
IS_PROD = ENV == "production"

# --------------------------------------------------
# Logging
# --------------------------------------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE = os.getenv("LOG_FILE")  # optional rotating file

# --------------------------------------------------
# OpenAI (key itself lives in the settings store)
# --------------------------------------------------
CHAT_MODEL = os.getenv("CHAT_MODEL", "o4-mini")
REASONING_EFFORT = os.getenv("REASONING_EFFORT", "high")  # low | medium | high
EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "text-embedding-3-small")

# --------------------------------------------------
# Retrieval
# --------------------------------------------------
RETRIEVAL_TOP_K = 8

# Metadata key that holds the chunk text (written at ingestion)
DOCUMENT_TEXT_KEY = os.getenv("DOCUMENT_TEXT_KEY", "text")

# --------------------------------------------------
# Pinecone (checked when the index client is built)
# --------------------------------------------------
PINECONE_API_KEY = os.getenv("PINECONE_API_KEY")
PINECONE_HOST = os.getenv("PINECONE_HOST")

# --------------------------------------------------
# Firestore (OPTIONAL)
# --------------------------------------------------
FIRESTORE_PROJECT = os.getenv("FIRESTORE_PROJECT")

if IS_PROD and not FIRESTORE_PROJECT:
    raise RuntimeError("FIRESTORE_PROJECT is required in production")

# In local/dev → settings come from InMemorySettingsRepo

# --------------------------------------------------
# Streaming
# --------------------------------------------------
STREAM_ERROR_MARKER = os.getenv(
    "STREAM_ERROR_MARKER",
    "\n\n[response interrupted: upstream error]",
)
