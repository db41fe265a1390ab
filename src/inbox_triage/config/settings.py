import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env once, globally
load_dotenv()

# Project root (independent of current working directory).
PROJECT_ROOT = Path(__file__).resolve().parents[3]


def resolve_dir(env_key: str, default: str) -> Path:
    """
    Resolve a directory path from ENV.
    Relative paths are resolved against PROJECT_ROOT.
    """
    value = os.getenv(env_key, default)
    path = Path(value)

    if not path.is_absolute():
        path = PROJECT_ROOT / path

    return path


SECRETS_DIR = resolve_dir("INBOX_TRIAGE_SECRETS_DIR", "secrets")

LOG_LEVEL = os.getenv("INBOX_TRIAGE_LOG_LEVEL", "INFO")
OPENAI_MODEL = os.getenv("INBOX_TRIAGE_OPENAI_MODEL", "gpt-4.1-mini")


def ping_message() -> str:
    return os.getenv("PING_MESSAGE", "ping")
