import random
import re
import string
from datetime import datetime

MAX_PROMPT_ID_LENGTH = 100
MIN_BASE_LENGTH = 10
SUFFIX_LENGTH = 6

_BASE36 = string.digits + string.ascii_lowercase


def _random_suffix(rng) -> str:
    return "".join(rng.choice(_BASE36) for _ in range(SUFFIX_LENGTH))


def _clean_title(title: str) -> str:
    base = title.upper()
    base = re.sub(r"\s+", "_", base)
    base = re.sub(r"[^A-Z0-9_]", "", base)
    base = re.sub(r"_+", "_", base)
    return base.strip("_")


def derive_prompt_id(title, now: datetime = None, rng=None) -> str:
    """
    Builds a readable, unique prompt id from a title:
    BASE_YYYYMMDD_HHMMSS_RANDOM, capped at 100 characters.

    Titles that clean down to nothing fall back to PROMPT_<epoch-ms>_<random>.
    `now` and `rng` can be injected to make the result deterministic.
    """
    rng = rng or random
    now = now or datetime.now()

    base = _clean_title(title) if isinstance(title, str) else ""
    if not base:
        epoch_ms = int(now.timestamp() * 1000)
        return f"PROMPT_{epoch_ms}_{_random_suffix(rng)}"

    timestamp = now.strftime("%Y%m%d_%H%M%S")
    suffix = _random_suffix(rng).upper()

    prompt_id = f"{base}_{timestamp}_{suffix}"
    if len(prompt_id) > MAX_PROMPT_ID_LENGTH:
        # Only the base shrinks; timestamp and suffix stay intact
        max_base = MAX_PROMPT_ID_LENGTH - len(timestamp) - len(suffix) - 2
        base = base[:max(MIN_BASE_LENGTH, max_base)].rstrip("_")
        prompt_id = f"{base}_{timestamp}_{suffix}"
    return prompt_id


def next_version_number(store, prompt_id: str) -> int:
    """max(version_number) + 1 for the prompt, or 1 when it has no versions yet."""
    latest = store.select(
        "prompt_versions",
        {"prompt_id": prompt_id},
        order_by="version_number",
        descending=True,
        limit=1,
    )
    if not latest:
        return 1
    return latest[0]["version_number"] + 1
