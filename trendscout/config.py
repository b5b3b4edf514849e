"""Key resolution, paths, constants, and setup wizard."""

import json
import os
import sys
from pathlib import Path

# ─────────────────────────────────────────────────────
# Home directory: config and logs live here
# ─────────────────────────────────────────────────────
HOME_DIR = Path(os.environ.get("TRENDSCOUT_HOME", Path.home() / ".trendscout"))
LOGS_DIR = HOME_DIR / "logs"
CONFIG_FILE = HOME_DIR / "config.json"

# ─────────────────────────────────────────────────────
# Discovery defaults, overridable in config.json
# ─────────────────────────────────────────────────────
DEFAULT_SOURCE_WEIGHTS = {
    "perplexity": 1.2,
    "firecrawl": 1.1,
    "openai": 1.0,
}
DEFAULT_RESULT_LIMIT = 5
DEFAULT_PROVIDER_TIMEOUT = 10.0
DEFAULT_SIMILARITY_THRESHOLD = 0.9

DEFAULT_NICHE = "Tech & AI"
DEFAULT_AUDIENCE = "Entrepreneurs"
DEFAULT_GEO = "US"

API_KEYS = [
    ("OPENAI_API_KEY", "OpenAI — GPT trend prompts + embeddings", "https://platform.openai.com/api-keys"),
    ("PERPLEXITY_API_KEY", "Perplexity — live web-grounded trend prompts", "https://www.perplexity.ai/settings/api"),
    ("FIRECRAWL_API_KEY", "Firecrawl — web + news search", "https://www.firecrawl.dev/app/api-keys"),
    ("ANTHROPIC_API_KEY", "Anthropic — Claude trend prompts", "https://console.anthropic.com/settings/keys"),
]


# ─────────────────────────────────────────────────────
# Utilities
# ─────────────────────────────────────────────────────
def write_secret_file(path: Path, content: str):
    """Write a file with 0600 permissions (owner read/write only).

    Uses os.open() with explicit mode so the file never exists with
    world-readable permissions.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(str(path), os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w") as f:
        f.write(content)


# ─────────────────────────────────────────────────────
# API key resolution: env, then config.json
# ─────────────────────────────────────────────────────
def _get_key(name: str) -> str:
    """Resolve an API key: environment variable first, then config.json."""
    val = os.environ.get(name)
    if val:
        return val
    val = load_config().get(name)
    if val and isinstance(val, str):
        return val
    return ""


def get_openai_key() -> str:
    return _get_key("OPENAI_API_KEY")


def get_perplexity_key() -> str:
    return _get_key("PERPLEXITY_API_KEY")


def get_firecrawl_key() -> str:
    return _get_key("FIRECRAWL_API_KEY")


def get_anthropic_key() -> str:
    return _get_key("ANTHROPIC_API_KEY")


def load_config() -> dict:
    """Load the full config.json, including trend_providers and source_weights."""
    if CONFIG_FILE.exists():
        try:
            cfg = json.loads(CONFIG_FILE.read_text())
        except (OSError, ValueError):
            return {}
        if isinstance(cfg, dict):
            return cfg
    return {}


def save_config(config: dict):
    """Save config.json with restricted permissions."""
    write_secret_file(CONFIG_FILE, json.dumps(config, indent=2))


# ─────────────────────────────────────────────────────
# Interactive setup
# ─────────────────────────────────────────────────────
def run_setup():
    """Interactive setup — prompts for provider keys and saves config.json."""
    print("\n" + "=" * 60)
    print("  trendscout — Setup")
    print("=" * 60)
    print("\nEvery provider is optional; discovery uses whichever keys are set.")
    print(f"Keys are saved to {CONFIG_FILE}\n")

    config = load_config()

    for i, (name, purpose, url) in enumerate(API_KEYS, 1):
        print(f"{i}. {purpose}")
        print(f"   Get yours at: {url}")
        current = " [set]" if config.get(name) else ""
        key = input(f"   {name}{current} (press Enter to skip): ").strip()
        if key:
            config[name] = key
        print()

    save_config(config)
    print(f"  Config saved to {CONFIG_FILE}\n")
    sys.exit(0)
