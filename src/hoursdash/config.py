from __future__ import annotations
import os
from dataclasses import dataclass, field
from dotenv import load_dotenv
import yaml

load_dotenv()

DEFAULT_BASE_URL = "https://api.clockify.me/api/v1"
PLACEHOLDER_API_KEY = "your-clockify-api-key-here"

def _env_expand(value: str) -> str:
    # supports ${VAR} interpolation for YAML strings
    import re
    pattern = re.compile(r"\$\{([A-Z0-9_]+)\}")
    def repl(m):
        return os.getenv(m.group(1), "")
    return pattern.sub(repl, value)

def load_config(path: str) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}
    # recursively expand env vars
    def walk(obj):
        if isinstance(obj, dict):
            return {k: walk(v) for k, v in obj.items()}
        if isinstance(obj, list):
            return [walk(x) for x in obj]
        if isinstance(obj, str):
            return _env_expand(obj)
        return obj
    return walk(cfg)

@dataclass(frozen=True)
class ClockifySettings:
    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    workspace_id: str | None = None
    page_size: int = 200
    timeout_seconds: float = 30.0
    max_attempts: int = 1
    billable_tag_ids: tuple[str, ...] = field(default_factory=tuple)

    def is_configured(self) -> bool:
        key = (self.api_key or "").strip()
        return bool(key) and key != PLACEHOLDER_API_KEY

    @classmethod
    def from_config(cls, config: dict | None = None) -> "ClockifySettings":
        section = (config or {}).get("clockify", {}) or {}
        base_url = section.get("base_url") or os.getenv("CLOCKIFY_BASE_URL", DEFAULT_BASE_URL)
        tag_ids = section.get("billable_tag_ids") or []
        if isinstance(tag_ids, str):
            tag_ids = [t.strip() for t in tag_ids.split(",")]
        return cls(
            api_key=section.get("api_key") or os.getenv("CLOCKIFY_API_KEY", ""),
            base_url=base_url.rstrip("/"),
            workspace_id=section.get("workspace_id") or os.getenv("CLOCKIFY_WORKSPACE_ID") or None,
            page_size=int(section.get("page_size", 200)),
            timeout_seconds=float(section.get("timeout_seconds", 30)),
            max_attempts=max(int(section.get("max_attempts", 1)), 1),
            billable_tag_ids=tuple(t for t in tag_ids if t),
        )
