"""Tests for dispmap.image."""

import numpy as np
import pytest
from PIL import Image

from dispmap.errors import FormatError, LoadError
from dispmap.image import bgr_to_rgb, crop, describe, load_image, save_image


class TestLoadImage:
    def test_rgb_loads_as_bgr(self, tmp_path):
        path = tmp_path / "map.png"
        Image.new("RGB", (3, 2), (10, 20, 30)).save(path)
        img = load_image(str(path))
        assert img.shape == (2, 3, 3)
        assert img.dtype == np.uint8
        assert img[0, 0].tolist() == [30, 20, 10]

    def test_rgba_keeps_alpha(self, tmp_path):
        path = tmp_path / "target.png"
        Image.new("RGBA", (4, 4), (10, 20, 30, 40)).save(path)
        img = load_image(str(path), keep_alpha=True)
        assert img.shape == (4, 4, 4)
        assert img[1, 1].tolist() == [30, 20, 10, 40]

    def test_rgba_drops_alpha_by_default(self, tmp_path):
        path = tmp_path / "target.png"
        Image.new("RGBA", (4, 4), (10, 20, 30, 40)).save(path)
        assert load_image(str(path)).shape == (4, 4, 3)

    def test_keep_alpha_without_alpha_band(self, tmp_path):
        path = tmp_path / "flat.png"
        Image.new("RGB", (4, 4), (1, 2, 3)).save(path)
        assert load_image(str(path), keep_alpha=True).shape == (4, 4, 3)

    def test_grayscale_becomes_three_channels(self, tmp_path):
        path = tmp_path / "gray.png"
        Image.new("L", (2, 2), 77).save(path)
        img = load_image(str(path))
        assert img[0, 0].tolist() == [77, 77, 77]

    def test_missing_file(self, tmp_path):
        with pytest.raises(LoadError):
            load_image(str(tmp_path / "nope.png"))

    def test_undecodable_file(self, tmp_path):
        path = tmp_path / "junk.png"
        path.write_bytes(b"not an image at all")
        with pytest.raises(LoadError):
            load_image(str(path))


class TestSaveImage:
    def test_roundtrip_bgra(self, tmp_path):
        img = np.random.randint(0, 256, (5, 6, 4), dtype=np.uint8)
        path = str(tmp_path / "out.png")
        save_image(img, path)
        np.testing.assert_array_equal(load_image(path, keep_alpha=True), img)

    def test_rejects_two_channels(self, tmp_path):
        with pytest.raises(FormatError):
            save_image(np.zeros((2, 2, 2), dtype=np.uint8), str(tmp_path / "x.png"))


class TestCrop:
    def test_is_view(self):
        img = np.random.randint(0, 256, (10, 20, 3), dtype=np.uint8)
        view = crop(img, 5, 2, 4, 3)
        assert view.shape == (3, 4, 3)
        assert np.shares_memory(view, img)
        np.testing.assert_array_equal(view, img[2:5, 5:9])

    @pytest.mark.parametrize("rect", [(-1, 0, 4, 4), (0, 0, 21, 4), (18, 0, 4, 4), (0, 8, 4, 4), (0, 0, 0, 4)])
    def test_out_of_bounds(self, rect):
        img = np.zeros((10, 20, 3), dtype=np.uint8)
        with pytest.raises(FormatError):
            crop(img, *rect)


class TestHelpers:
    def test_describe(self):
        assert describe(np.zeros((3, 7, 4), dtype=np.uint8)) == "7x3 channels:4"

    def test_bgr_to_rgb(self):
        img = np.zeros((1, 1, 4), dtype=np.uint8)
        img[0, 0] = (1, 2, 3, 4)
        assert bgr_to_rgb(img)[0, 0].tolist() == [3, 2, 1]
