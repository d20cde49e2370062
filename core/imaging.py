import os

from PIL import Image
from pillow_heif import register_heif_opener

from core.errors import ConversionFailure

# Lets Pillow open the HEIC/HEIF stills iPhones produce
register_heif_opener()


def is_heic(filename: str) -> bool:
    return os.path.splitext(filename)[1].lower() == ".heic"


def convert_heic_to_jpeg(heic_path: str, quality: int = 92) -> str:
    """Convert a HEIC file to a sibling ``.jpg`` and remove the original.

    Returns the JPEG path. Raises ConversionFailure and leaves the HEIC file
    untouched if decoding or encoding fails.
    """
    jpeg_path = os.path.splitext(heic_path)[0] + ".jpg"
    try:
        with Image.open(heic_path) as img:
            if img.mode not in ("RGB", "L"):
                img = img.convert("RGB")
            exif = img.info.get("exif")
            save_kwargs = {"format": "JPEG", "quality": quality}
            if exif:
                save_kwargs["exif"] = exif
            img.save(jpeg_path, **save_kwargs)
    except Exception as exc:
        if os.path.exists(jpeg_path):
            os.remove(jpeg_path)
        raise ConversionFailure(f"HEIC conversion failed for {os.path.basename(heic_path)}: {exc}") from exc
    os.remove(heic_path)
    return jpeg_path
