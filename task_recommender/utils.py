import hashlib
import json
import time
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union
import os

from openai import AzureOpenAI, OpenAI

from .config import (
    AZURE_OPENAI_API_KEY,
    AZURE_OPENAI_ENDPOINT,
    AZURE_OPENAI_DEPLOYMENT,
    AZURE_OPENAI_API_VERSION,
    OPENAI_API_KEY,
    OPENAI_MODEL,
    LLM_RATE_LIMIT_SECONDS,
    PLAN_CACHE_FILE,
)

# ---------- Logging ----------
logger = logging.getLogger(__name__)

# ---------- LLM Client ----------
_llm_client: Optional[Union[AzureOpenAI, OpenAI]] = None


def get_llm_client() -> Union[AzureOpenAI, OpenAI]:
    global _llm_client
    if _llm_client is None:
        if AZURE_OPENAI_API_KEY and AZURE_OPENAI_ENDPOINT:
            _llm_client = AzureOpenAI(
                api_key=AZURE_OPENAI_API_KEY,
                azure_endpoint=AZURE_OPENAI_ENDPOINT,
                api_version=AZURE_OPENAI_API_VERSION,
            )
        elif OPENAI_API_KEY:
            _llm_client = OpenAI(api_key=OPENAI_API_KEY)
        else:
            raise RuntimeError("LLM configuration is missing")
    return _llm_client


def llm_model_name() -> str:
    if AZURE_OPENAI_API_KEY and AZURE_OPENAI_ENDPOINT:
        return AZURE_OPENAI_DEPLOYMENT
    return OPENAI_MODEL


def llm_configured() -> bool:
    return bool((AZURE_OPENAI_API_KEY and AZURE_OPENAI_ENDPOINT) or OPENAI_API_KEY)


# Allow simulated LLM mode (for local/dev runs)
SIMULATE_LLM = os.getenv("SIMULATE_LLM", "0").lower() in ("1", "true", "yes")


# ---------- Cache ----------
def _load_cache(path: Path) -> Dict:
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    return {}


def _save_cache(path: Path, cache: Dict) -> None:
    if not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(cache, f, indent=2)


def cache_key_for(*parts: str) -> str:
    return hashlib.sha256("\n".join(parts).encode("utf-8")).hexdigest()


def _passes(validate: Optional[Callable[[str], Any]], text: str) -> bool:
    if validate is None:
        return True
    try:
        validate(text)
    except ValueError:
        return False
    return True


# ---------- LLM Call ----------
def call_llm_with_cache(
    system_prompt: str,
    user_prompt: str,
    cache_key: str,
    cache_file: Path,
    max_tokens: int = 4096,
    validate: Optional[Callable[[str], Any]] = None,
) -> Optional[str]:
    """Return the model's JSON text for a prompt, memoised on disk.

    Returns None when no LLM is configured or the request fails; callers
    decide what to fall back to. When ``validate`` is given, a response it
    rejects with ValueError is still returned but never written to the
    cache, so the next call asks the model again.
    """
    cache = _load_cache(cache_file)

    if cache_key in cache:
        return cache[cache_key]

    if SIMULATE_LLM or not llm_configured():
        logger.info("LLM not configured; skipping model call")
        return None

    messages: List[Dict[str, str]] = [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_prompt},
    ]

    try:
        client = get_llm_client()

        response = client.chat.completions.create(
            model=llm_model_name(),
            messages=messages,
            max_tokens=max_tokens,
            temperature=0.2,
            response_format={"type": "json_object"},
        )

        response_text = response.choices[0].message.content
        if not response_text:
            logger.warning("Empty response from LLM")
            return None

        if _passes(validate, response_text):
            cache[cache_key] = response_text
            _save_cache(cache_file, cache)
        else:
            logger.info("LLM response failed validation; not cached")

        if LLM_RATE_LIMIT_SECONDS:
            time.sleep(LLM_RATE_LIMIT_SECONDS)
        return response_text

    except Exception as exc:
        logger.warning("LLM request failed: %s", exc)
        return None


# ---------- Convenience Wrappers ----------
def llm_plan_generate(
    system_prompt: str,
    user_prompt: str,
    validate: Optional[Callable[[str], Any]] = None,
) -> Optional[str]:
    return call_llm_with_cache(
        system_prompt=system_prompt,
        user_prompt=user_prompt,
        cache_key=cache_key_for(system_prompt, user_prompt),
        cache_file=PLAN_CACHE_FILE,
        validate=validate,
    )
