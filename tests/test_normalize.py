import re

import pytest

from woo_sheet_tools.media_library import normalize_filename, strip_extension

SAMPLES = [
    "photo.jpg",
    "Photo Final (2).JPG",
    "uploads/2024/05/Red_Shirt-XL.png",
    "C:\\Users\\me\\Pictures\\Blue Hat.jpeg",
    "https://shop.example.com/wp-content/uploads/2023/01/mug-300x300.webp",
    "  spaced name .gif  ",
    "archive.tar.gz",
    "...",
    "--already-slugged--",
    "Café Crème.png",
    "",
    "no_extension",
    "dots.in.name.txt",
]


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("photo.jpg", "photo"),
        ("Photo Final (2).JPG", "photo-final-2"),
        ("uploads/2024/05/Red_Shirt-XL.png", "red-shirt-xl"),
        ("C:\\Users\\me\\Pictures\\Blue Hat.jpeg", "blue-hat"),
        ("archive.tar.gz", "archive-tar"),
        ("no_extension", "no-extension"),
        ("  spaced name .gif  ", "spaced-name"),
        ("Tom &amp; Jerry", "tom-amp-jerry"),
        ("", ""),
        ("...", ""),
    ],
)
def test_normalize_filename(raw, expected):
    assert normalize_filename(raw) == expected


def test_none_normalizes_to_empty():
    assert normalize_filename(None) == ""


def test_non_string_values_use_their_text():
    assert normalize_filename(1234) == "1234"


@pytest.mark.parametrize("raw", SAMPLES)
def test_normalize_is_idempotent(raw):
    once = normalize_filename(raw)
    assert normalize_filename(once) == once


@pytest.mark.parametrize("raw", SAMPLES)
def test_normalized_keys_are_slugs(raw):
    key = normalize_filename(raw)
    assert key == "" or re.fullmatch(r"[a-z0-9]+(-[a-z0-9]+)*", key)


def test_extension_only_stripped_from_last_segment():
    assert strip_extension("photo.final.jpg") == "photo.final"
    assert strip_extension("dir.v2/photo") == "dir.v2/photo"
