"""
Screenshot Utilities
====================

In-memory screenshot data and debugging helpers.

Screenshots are returned as PNG bytes; writing them anywhere is left to
the caller.

Provides functions for:
- Validating and wrapping PNG bytes from ``screencap``
- Encoding a PIL image (uiautomator2 screenshots) to PNG
- Drawing ScreenNode bounds onto a screenshot for debugging
"""

import base64
import io
import time
from dataclasses import dataclass, field
from typing import Iterable

from PIL import Image, ImageDraw, UnidentifiedImageError

from automator.model.screen_node import ScreenNode
from automator.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Screenshot:
    """
    A captured screen image.

    Attributes:
        name: Caller-supplied label.
        png: PNG-encoded image bytes.
        width: Image width in pixels.
        height: Image height in pixels.
        taken_at: Capture time (epoch seconds).
    """

    name: str
    png: bytes
    width: int
    height: int
    taken_at: float = field(default_factory=time.time)

    @property
    def filename(self) -> str:
        """Suggested file name, ``<name>_<epoch ms>.png``."""
        return f"{self.name}_{int(self.taken_at * 1000)}.png"

    def to_base64(self) -> str:
        return base64.b64encode(self.png).decode("utf-8")


def screenshot_from_png(name: str, data: bytes) -> Screenshot:
    """
    Wrap raw ``screencap -p`` output.

    Raises:
        ValueError: If the bytes are empty or not a readable image.
    """
    if not data:
        raise ValueError("Screenshot appears empty")

    try:
        with Image.open(io.BytesIO(data)) as image:
            image.verify()
        with Image.open(io.BytesIO(data)) as image:
            width, height = image.size
    except (UnidentifiedImageError, OSError) as e:
        raise ValueError(f"Screenshot appears corrupted: {e}") from e

    return Screenshot(name=name, png=data, width=width, height=height)


def screenshot_from_image(name: str, image: Image.Image) -> Screenshot:
    """Encode a PIL image (as returned by uiautomator2) to PNG."""
    if image.mode not in ("RGB", "RGBA", "L", "P"):
        image = image.convert("RGB")

    output = io.BytesIO()
    image.save(output, format="PNG")
    return Screenshot(name=name, png=output.getvalue(), width=image.width, height=image.height)


def annotate_nodes(shot: Screenshot, nodes: Iterable[ScreenNode]) -> Screenshot:
    """
    Draw node bounding boxes onto a copy of the screenshot.

    Clickable nodes are outlined in green, everything else in blue.
    Nodes without bounds are skipped.
    """
    image = Image.open(io.BytesIO(shot.png)).convert("RGB")
    draw = ImageDraw.Draw(image)

    count = 0
    for node in nodes:
        bounds = node.bounds
        if bounds is None or bounds.width == 0 or bounds.height == 0:
            continue

        color = (0, 255, 0) if node.clickable else (100, 100, 255)
        draw.rectangle(
            [(bounds.left, bounds.top), (bounds.right, bounds.bottom)],
            outline=color,
            width=2 if node.clickable else 1,
        )
        count += 1

    logger.debug("Screenshot annotated", node_count=count)

    annotated = screenshot_from_image(f"{shot.name}_annotated", image)
    return Screenshot(
        name=annotated.name,
        png=annotated.png,
        width=annotated.width,
        height=annotated.height,
        taken_at=shot.taken_at,
    )
