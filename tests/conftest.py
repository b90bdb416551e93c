"""
conftest.py

Shared fixtures: image folders built with Pillow, and offscreen Qt setup.
"""

import os
import sys

# Add project root to sys.path so 'core', 'cli' and 'gui' can be imported
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# Qt must not need a display for the adapter tests
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import logging
from pathlib import Path

import pytest
from PIL import Image


def write_image(path: Path, size=(64, 48), color=(200, 30, 30)) -> Path:
    """Write a small real image; format follows the extension"""
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, color).save(path)
    return path


@pytest.fixture
def make_images(tmp_path):
    """Factory creating image files under tmp_path (or a subfolder)"""
    def _make(*names, folder=None):
        base = tmp_path / folder if folder else tmp_path
        return [write_image(base / name) for name in names]
    return _make


@pytest.fixture
def image_dir(tmp_path, make_images):
    """Folder with three images out of natural order, a text file and a hidden image"""
    make_images("img10.png", "img2.png", "img1.jpg", ".hidden.png")
    (tmp_path / "notes.txt").write_text("not an image")
    return tmp_path


@pytest.fixture(autouse=True)
def restore_root_logger():
    """configure_logging() installs root handlers; drop them after each test"""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
