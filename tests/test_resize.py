import pytest
from PIL import Image

from gopherize.processing import resize_overlay, round_half_up


@pytest.mark.parametrize(
    "width, expected",
    [(40, (40, 20)), (20, (20, 10)), (7, (7, 4)), (1, (1, 1)), (200, (200, 100))],
)
def test_resize_keeps_aspect_ratio(eye_sprite, width, expected):
    assert resize_overlay(eye_sprite, width).size == expected


def test_resize_odd_aspect():
    sprite = Image.new("RGBA", (33, 47), (0, 0, 0, 255))
    resized = resize_overlay(sprite, 100)
    assert resized.width == 100
    assert abs(resized.height / resized.width - 47 / 33) < 0.01


def test_zero_width_is_empty(eye_sprite):
    resized = resize_overlay(eye_sprite, 0)
    assert resized.size == (0, 0)


def test_negative_width_rejected(eye_sprite):
    with pytest.raises(ValueError):
        resize_overlay(eye_sprite, -1)


def test_asset_not_modified(eye_sprite):
    before = eye_sprite.tobytes()
    resized = resize_overlay(eye_sprite, eye_sprite.width)
    resized.putpixel((0, 0), (1, 1, 1, 1))
    assert resized is not eye_sprite
    assert eye_sprite.size == (20, 10)
    assert eye_sprite.tobytes() == before


def test_resampling_keeps_solid_colour(eye_sprite):
    resized = resize_overlay(eye_sprite, 57)
    assert resized.getpixel((28, resized.height // 2)) == (255, 0, 0, 255)


@pytest.mark.parametrize("value, expected", [(0.4, 0), (0.5, 1), (2.5, 3), (39.6, 40), (40.0, 40)])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected
