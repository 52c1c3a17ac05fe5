"""Filename Rules — sanitizing, naming and path safety for stored images."""

import hashlib

import pytest

from aixchange.core.filenames import (
    build_event_image_filename, build_generated_filename, build_upload_filename,
    content_type_for, is_safe_relative_path, is_valid_folder, sanitize_filename,
    split_extension,
)


@pytest.mark.parametrize("raw, expected", [
    ("Text Summarizer", "text_summarizer"),
    ("  --Hello, World!!  ", "hello_world"),
    ("Ünïcode名前", "n_code"),
    ("!!!", ""),
])
def test_sanitize_filename(raw, expected):
    assert sanitize_filename(raw) == expected


def test_split_extension():
    assert split_extension("Photo.PNG") == ("photo", ".png")
    assert split_extension("archive.tar.gz") == ("archive.tar", ".gz")
    assert split_extension("README") == ("readme", "")
    assert split_extension(".hidden") == (".hidden", "")


def test_upload_filename():
    assert build_upload_filename("My Photo.PNG", 1700000000000) == "my_photo-1700000000000.png"


def test_upload_filename_without_usable_stem():
    assert build_upload_filename("???.jpg", 5) == "file-5.jpg"


def test_generated_filename_falls_back_to_solution():
    assert build_generated_filename("Chat Bot", 7, "png") == "chat_bot-7.png"
    assert build_generated_filename(None, 7, "png") == "solution-7.png"
    assert build_generated_filename("***", 7, "png") == "solution-7.png"


def test_event_image_filename_is_stable():
    prompt = "Spring Hackathon - Build"
    digest = hashlib.md5(prompt.encode()).hexdigest()[:8]
    assert build_event_image_filename(prompt) == f"event-{digest}.png"
    assert build_event_image_filename(prompt) == build_event_image_filename(prompt)


@pytest.mark.parametrize("folder, ok", [
    ("solutions", True),
    ("user-avatars_2", True),
    ("", False),
    ("../etc", False),
    ("Upper", False),
])
def test_valid_folder(folder, ok):
    assert is_valid_folder(folder) is ok


@pytest.mark.parametrize("path, ok", [
    ("solutions/a.png", True),
    ("../secret", False),
    ("solutions/../../x", False),
    ("/etc/passwd", False),
    ("a\\b.png", False),
    ("", False),
])
def test_safe_relative_path(path, ok):
    assert is_safe_relative_path(path) is ok


def test_content_type_for():
    assert content_type_for("a.JPG") == "image/jpeg"
    assert content_type_for("a.gif") == "image/gif"
    assert content_type_for("noext") == "application/octet-stream"
