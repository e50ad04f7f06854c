import pytest
from PIL import Image

PALETTE = [
    (255, 0, 0, 255),
    (0, 255, 0, 255),
    (0, 0, 255, 255),
    (255, 255, 0, 255),
    (0, 255, 255, 255),
    (255, 0, 255, 255),
    (128, 128, 128, 255),
    (10, 20, 30, 255),
    (200, 100, 50, 255),
]


@pytest.fixture
def solid_images():
    """Factory for n solid-color RGBA images of a given size."""

    def make(n, size=(40, 30)):
        return [Image.new("RGBA", size, PALETTE[i % len(PALETTE)]) for i in range(n)]

    return make
