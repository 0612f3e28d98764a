import numpy as np
import pytest

from omr_grader.config import DetectionConfig
from omr_grader.density import ink_density


def test_blank_region_has_no_ink(blank_sheet, region):
    assert ink_density(blank_sheet(), region()) == 0.0


def test_filled_region_is_fully_dark(blank_sheet, region):
    image = blank_sheet()
    image[40:80, 40:80] = 0
    assert ink_density(image, region()) == 1.0


def test_half_filled_region(blank_sheet, region):
    image = blank_sheet()
    # Region spans pixels 40-80; the sampled window is 46-74.
    image[40:80, 40:60] = 0
    assert ink_density(image, region()) == pytest.approx(0.5)


def test_printed_border_is_not_counted(blank_sheet, region):
    image = blank_sheet()
    image[40:43, 40:80] = 0
    image[77:80, 40:80] = 0
    image[40:80, 40:43] = 0
    image[40:80, 77:80] = 0
    assert ink_density(image, region()) == 0.0


def test_zero_inset_counts_border(blank_sheet, region):
    image = blank_sheet()
    image[40:44, 40:80] = 0
    cfg = DetectionConfig(sample_inset=0.0)
    assert ink_density(image, region(), cfg) == pytest.approx(0.1)


def test_brightness_is_unweighted_channel_mean(blank_sheet, region):
    image = blank_sheet()
    image[40:80, 40:80] = (0, 255, 255)  # mean 170, not below the cutoff
    assert ink_density(image, region()) == 0.0

    image[40:80, 40:80] = (0, 255, 250)  # mean 168.3
    assert ink_density(image, region()) == 1.0


def test_alpha_channel_is_ignored(blank_sheet, region):
    image = blank_sheet(channels=4)
    image[:, :, 3] = 0
    assert ink_density(image, region()) == 0.0

    image[40:80, 40:80, :3] = 0
    image[40:80, 40:80, 3] = 255
    assert ink_density(image, region()) == 1.0


def test_grayscale_image(blank_sheet, region):
    image = blank_sheet(channels=1)
    image[40:80, 40:80] = 100
    assert ink_density(image, region()) == 1.0


@pytest.mark.parametrize('geometry', [
    dict(w=0),
    dict(h=0),
    dict(x=100, w=0),
    dict(x=100, y=100, w=0, h=0),
    dict(w=0.1, h=0.1),
])
def test_degenerate_regions_read_as_empty(blank_sheet, region, geometry):
    image = blank_sheet()
    image[:] = 0
    assert ink_density(image, region(**geometry)) == 0.0


def test_region_clamped_to_image(blank_sheet, region):
    image = blank_sheet()
    image[:] = 0
    density = ink_density(image, region(x=95, y=95, w=10, h=10))
    assert density == 1.0


@pytest.mark.parametrize('image', [None, 'not an image', np.zeros((0, 0, 3), dtype=np.uint8)])
def test_unreadable_image_reads_as_empty(image, region):
    assert ink_density(image, region()) == 0.0


def test_density_is_bounded_on_noise(region):
    rng = np.random.default_rng(7)
    image = rng.integers(0, 256, size=(300, 500, 3), dtype=np.uint8)
    for x in range(0, 100, 7):
        for y in range(0, 100, 11):
            density = ink_density(image, region(x=x, y=y, w=min(13, 100 - x), h=min(9, 100 - y)))
            assert 0.0 <= density <= 1.0
            assert not np.isnan(density)


def test_density_is_repeatable(region):
    rng = np.random.default_rng(3)
    image = rng.integers(0, 256, size=(200, 200, 3), dtype=np.uint8)
    r = region(x=12.5, y=33.3, w=20, h=15)
    assert ink_density(image, r) == ink_density(image, r)
