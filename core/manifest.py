import json
from typing import Any, List, Optional


class ManifestError(RuntimeError):
    """The manifest cannot drive a batch: unreadable, unparseable or malformed."""


class ManifestReader:
    IMAGES_KEY = 'images'
    FILE_NAME_KEY = 'file_name'

    @staticmethod
    def load(manifest_path: str) -> List[Any]:
        """
        Reads a COCO-style annotation file and returns its image entries in order.

        Raises:
            ManifestError: the file cannot be read, is not valid JSON, or has
                no top-level "images" array.
        """
        try:
            with open(manifest_path, 'r', encoding='utf-8') as f:
                document = json.load(f)
        except OSError as e:
            raise ManifestError(f"Could not open manifest {manifest_path}: {e}") from e
        except ValueError as e:
            raise ManifestError(f"Error parsing manifest {manifest_path}: {e}") from e

        if not isinstance(document, dict):
            raise ManifestError(f"Invalid manifest format in {manifest_path}: expected a JSON object")
        images = document.get(ManifestReader.IMAGES_KEY)
        if not isinstance(images, list):
            raise ManifestError(
                f"Invalid manifest format in {manifest_path}: missing '{ManifestReader.IMAGES_KEY}' array"
            )
        return images

    @staticmethod
    def entry_file_name(entry: Any) -> Optional[str]:
        """Returns the entry's relative filename, or None when it has no usable one."""
        if not isinstance(entry, dict):
            return None
        name = entry.get(ManifestReader.FILE_NAME_KEY)
        if not isinstance(name, str) or not name.strip():
            return None
        return name
