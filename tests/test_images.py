import pytest
from PIL import Image

from gothicframework.config import Config, OptimizeImagesConfig
from gothicframework.images import ImageOptimizer, blurred_size
from gothicframework.project import GothicCli


def make_optimizer(tmp_path, rate=0):
    cli = GothicCli(
        runtime="linux",
        config=Config(optimize_images=OptimizeImagesConfig(low_resolution_rate=rate)),
    )
    (tmp_path / "optimize").mkdir()
    return ImageOptimizer(cli, input_dir=tmp_path / "optimize", output_dir=tmp_path / "public")


def save_image(path, size=(100, 50), fmt="PNG"):
    Image.new("RGB", size, (200, 10, 10)).save(path, format=fmt)


def open_info(path):
    with Image.open(path) as image:
        return image.size, image.format


def test_blurred_size_scales_both_sides():
    assert blurred_size(100, 50, 20) == (20, 10)


def test_blurred_size_full_rate_keeps_size():
    assert blurred_size(640, 480, 100) == (640, 480)


def test_blurred_size_both_sides_zero_keeps_original():
    assert blurred_size(3, 4, 10) == (3, 4)


def test_blurred_size_one_side_zero_keeps_aspect():
    assert blurred_size(4, 100, 20) == (1, 20)


def test_png_gets_original_and_blurred(tmp_path):
    optimizer = make_optimizer(tmp_path)
    save_image(tmp_path / "optimize" / "logo.png")
    optimizer.optimize_images()

    out = tmp_path / "public" / "logo"
    assert open_info(out / "original.png") == ((100, 50), "PNG")
    assert open_info(out / "blurred.png") == (blurred_size(100, 50, 20), "PNG")


def test_rate_from_config_is_used(tmp_path):
    optimizer = make_optimizer(tmp_path, rate=50)
    save_image(tmp_path / "optimize" / "logo.png")
    optimizer.optimize_images()
    size, _ = open_info(tmp_path / "public" / "logo" / "blurred.png")
    assert size == blurred_size(100, 50, 50)


def test_jpeg_outputs_are_jpeg(tmp_path):
    optimizer = make_optimizer(tmp_path)
    save_image(tmp_path / "optimize" / "photo.jpg", fmt="JPEG")
    optimizer.optimize_images()
    out = tmp_path / "public" / "photo"
    assert open_info(out / "original.jpg") == ((100, 50), "JPEG")
    assert open_info(out / "blurred.jpg") == (blurred_size(100, 50, 20), "JPEG")


def test_webp_outputs_are_written_as_png(tmp_path):
    optimizer = make_optimizer(tmp_path)
    save_image(tmp_path / "optimize" / "hero.webp", fmt="WEBP")
    optimizer.optimize_images()
    out = tmp_path / "public" / "hero"
    assert open_info(out / "original.webp") == ((100, 50), "PNG")
    assert open_info(out / "blurred.webp") == (blurred_size(100, 50, 20), "PNG")


def test_unsupported_format_raises(tmp_path):
    optimizer = make_optimizer(tmp_path)
    save_image(tmp_path / "optimize" / "anim.gif", fmt="GIF")
    with pytest.raises(ValueError, match="unsupported file format: .gif"):
        optimizer.optimize_images()


def test_directory_in_input_raises(tmp_path):
    optimizer = make_optimizer(tmp_path)
    (tmp_path / "optimize" / "nested").mkdir()
    with pytest.raises(ValueError, match="optimizeImages"):
        optimizer.optimize_images()


def test_corrupt_image_raises(tmp_path):
    optimizer = make_optimizer(tmp_path)
    (tmp_path / "optimize" / "broken.png").write_bytes(b"not an image")
    with pytest.raises(ValueError, match="error decoding image"):
        optimizer.optimize_images()


def test_content_must_match_extension(tmp_path):
    optimizer = make_optimizer(tmp_path)
    save_image(tmp_path / "optimize" / "mislabeled.png", fmt="JPEG")
    with pytest.raises(ValueError, match="error decoding image"):
        optimizer.optimize_images()


def test_missing_input_folder_raises(tmp_path):
    cli = GothicCli(runtime="linux", config=Config())
    optimizer = ImageOptimizer(cli, input_dir=tmp_path / "absent", output_dir=tmp_path / "public")
    with pytest.raises(FileNotFoundError):
        optimizer.optimize_images()
    assert (tmp_path / "public").is_dir()