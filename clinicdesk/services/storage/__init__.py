from .uploader import (
    CONFIG_FOLDER,
    VISITS_FOLDER,
    ImageUploadError,
    ImageUploader,
    UploadResult,
    get_image_uploader,
    is_inline_image,
)

__all__ = [
    "CONFIG_FOLDER",
    "VISITS_FOLDER",
    "ImageUploadError",
    "ImageUploader",
    "UploadResult",
    "get_image_uploader",
    "is_inline_image",
]
