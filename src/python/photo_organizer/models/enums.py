"""Enumerations for photo-organizer models."""

from enum import Enum
from pathlib import Path
from typing import Optional, Tuple


class ContainerFormat(Enum):
    """
    Binary container families that carry (or may carry) date metadata.

    The family decides where the metadata lives inside the file:
    - JPEG: APP1 marker segment holding a TIFF-structured EXIF block
    - TIFF: the file itself is a TIFF offset table (TIFF and most RAW formats)
    - HEIF: ISO base media file with an Exif item (HEIC, HEIF)
    - PNG: eXIf chunk holding a TIFF-structured EXIF block
    - GENERIC: recognised images that never carry EXIF dates (GIF, BMP, WebP)
    - UNSUPPORTED: anything else
    """
    JPEG = "jpeg"
    TIFF = "tiff"
    HEIF = "heif"
    PNG = "png"
    GENERIC = "generic"
    UNSUPPORTED = "unsupported"

    @classmethod
    def from_extension(cls, extension: str) -> "ContainerFormat":
        """
        Get the container family from a file extension.

        Args:
            extension: File extension (with or without leading dot)

        Returns:
            The matching ContainerFormat, or UNSUPPORTED if not recognized
        """
        ext = extension.lower().lstrip(".")
        return _EXTENSION_FORMATS.get(ext, cls.UNSUPPORTED)

    @classmethod
    def from_filename(cls, filename: str) -> "ContainerFormat":
        """
        Get the container family from a filename or file path.

        Examples:
            >>> ContainerFormat.from_filename("IMG_0001.JPG")
            <ContainerFormat.JPEG: 'jpeg'>
            >>> ContainerFormat.from_filename("/photos/DSC_0042.NEF")
            <ContainerFormat.TIFF: 'tiff'>
        """
        return cls.from_extension(Path(filename).suffix)

    @property
    def has_embedded_metadata(self) -> bool:
        """Check if files of this family are searched for date fields."""
        return self in (
            ContainerFormat.JPEG, ContainerFormat.TIFF,
            ContainerFormat.HEIF, ContainerFormat.PNG,
        )


_EXTENSION_FORMATS = {
    # JPEG marker family
    "jpg": ContainerFormat.JPEG,
    "jpeg": ContainerFormat.JPEG,
    "jpe": ContainerFormat.JPEG,

    # TIFF offset-table family (TIFF and the RAW variants built on it)
    "tif": ContainerFormat.TIFF,
    "tiff": ContainerFormat.TIFF,
    "cr2": ContainerFormat.TIFF,      # Canon
    "nef": ContainerFormat.TIFF,      # Nikon
    "nrw": ContainerFormat.TIFF,      # Nikon (compact)
    "arw": ContainerFormat.TIFF,      # Sony
    "dng": ContainerFormat.TIFF,      # Adobe Digital Negative
    "orf": ContainerFormat.TIFF,      # Olympus
    "rw2": ContainerFormat.TIFF,      # Panasonic
    "pef": ContainerFormat.TIFF,      # Pentax
    "srw": ContainerFormat.TIFF,      # Samsung

    # ISO base media family
    "heic": ContainerFormat.HEIF,
    "heif": ContainerFormat.HEIF,
    "hif": ContainerFormat.HEIF,

    "png": ContainerFormat.PNG,

    # Images without EXIF date fields
    "gif": ContainerFormat.GENERIC,
    "bmp": ContainerFormat.GENERIC,
    "webp": ContainerFormat.GENERIC,
}


class DateField(Enum):
    """
    EXIF date fields that can supply a capture date, named after their tags.

    Ranked by how closely they describe the moment of capture:
    - DATE_TIME_ORIGINAL: when the shutter fired
    - DATE_TIME_DIGITIZED: when the image was stored digitally
    - DATE_TIME: when the file was last modified
    """
    DATE_TIME_ORIGINAL = "DateTimeOriginal"
    DATE_TIME_DIGITIZED = "DateTimeDigitized"
    DATE_TIME = "DateTime"

    @classmethod
    def by_priority(cls) -> Tuple["DateField", ...]:
        """Fields ordered from most to least authoritative."""
        return (cls.DATE_TIME_ORIGINAL, cls.DATE_TIME_DIGITIZED, cls.DATE_TIME)

    @classmethod
    def from_tag_name(cls, name: str) -> Optional["DateField"]:
        """Get the field for an EXIF tag name, or None for other tags."""
        for date_field in cls:
            if date_field.value == name:
                return date_field
        return None

    @property
    def priority(self) -> int:
        """Rank of this field, 0 being the most authoritative."""
        return DateField.by_priority().index(self)


class TransferAction(Enum):
    """How a planned file reaches its destination."""
    COPY = "copy"
    MOVE = "move"
