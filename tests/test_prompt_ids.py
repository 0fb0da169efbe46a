import random
import re
from datetime import datetime

import pytest

from prompthub.services.prompt_ids import derive_prompt_id, next_version_number

NOW = datetime(2024, 3, 5, 14, 7, 9)
SUFFIX = re.compile(r"_(\d{8}_\d{6})_([0-9A-Z]{6})$")
FALLBACK = re.compile(r"^PROMPT_\d+_[0-9a-z]{6}$")


def strip_suffix(prompt_id):
    match = SUFFIX.search(prompt_id)
    assert match, prompt_id
    return prompt_id[: match.start()]


def test_title_is_cleaned_and_suffixed():
    prompt_id = derive_prompt_id("  Customer   support: reply!! ", now=NOW, rng=random.Random(1))

    assert strip_suffix(prompt_id) == "CUSTOMER_SUPPORT_REPLY"
    assert SUFFIX.search(prompt_id).group(1) == "20240305_140709"


def test_same_seed_gives_same_id():
    first = derive_prompt_id("Summarize email", now=NOW, rng=random.Random(7))
    second = derive_prompt_id("Summarize email", now=NOW, rng=random.Random(7))

    assert first == second


def test_repeated_titles_get_different_suffixes():
    rng = random.Random(3)
    assert derive_prompt_id("Same", now=NOW, rng=rng) != derive_prompt_id("Same", now=NOW, rng=rng)


@pytest.mark.parametrize(
    "title",
    ["a", "hello world", "Ünïcödé tïtle", "__lead_and_trail__", "x" * 300, "word " * 60, "tab\tand\nnewline"],
)
def test_ids_are_upper_snake_and_bounded(title):
    prompt_id = derive_prompt_id(title, now=NOW, rng=random.Random(0))

    assert prompt_id
    assert len(prompt_id) <= 100
    base = strip_suffix(prompt_id)
    assert re.fullmatch(r"[A-Z0-9_]+", base)
    assert "__" not in base
    assert not base.startswith("_") and not base.endswith("_")


def test_long_title_keeps_timestamp_and_suffix():
    prompt_id = derive_prompt_id("A" * 250, now=NOW, rng=random.Random(0))

    assert len(prompt_id) == 100
    assert prompt_id.startswith("A" * 77 + "_20240305_140709_")


@pytest.mark.parametrize("title", ["", "###", "   ", None, "!!! ??? ..."])
def test_empty_titles_fall_back(title):
    prompt_id = derive_prompt_id(title, now=NOW, rng=random.Random(0))

    assert FALLBACK.match(prompt_id)
    assert prompt_id.startswith(f"PROMPT_{int(NOW.timestamp() * 1000)}_")


def test_next_version_number(store):
    store.insert("prompt_master", {"prompt_id": "P1", "title": "P1"})
    assert next_version_number(store, "P1") == 1

    for number in (1, 2, 5):
        store.insert("prompt_versions", {"prompt_id": "P1", "version_number": number, "prompt_text": "t"})

    assert next_version_number(store, "P1") == 6
    assert next_version_number(store, "OTHER") == 1
