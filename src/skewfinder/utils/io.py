"""
I/O utilities for skew detection.

Handles:
- PDF page rendering to images
- Image loading and saving
- JSON reports
- Input type detection
"""

import json
import logging
from pathlib import Path
from typing import List, Union, Optional, Any, Tuple
from dataclasses import asdict
from enum import Enum

import numpy as np

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = ('.png', '.jpg', '.jpeg', '.tiff', '.tif', '.bmp')


# ============================================================================
# PDF to Image Conversion
# ============================================================================

def load_pdf(
    pdf_path: Union[str, Path],
    dpi: int = 300,
    first_page: Optional[int] = None,
    last_page: Optional[int] = None
) -> List[np.ndarray]:
    """
    Convert PDF pages to grayscale images using pdf2image (poppler backend).

    Args:
        pdf_path: Path to the PDF file
        dpi: Resolution for rendering
        first_page: First page to convert (1-indexed, None = first)
        last_page: Last page to convert (1-indexed, None = last)

    Returns:
        List of uint8 grayscale arrays, one per page

    Raises:
        FileNotFoundError: If PDF file doesn't exist
        ImportError: If pdf2image is not installed
        RuntimeError: If the PDF cannot be parsed or poppler is missing
    """
    pdf_path = Path(pdf_path)
    if not pdf_path.exists():
        raise FileNotFoundError(f"PDF file not found: {pdf_path}")

    try:
        from pdf2image import convert_from_path
        from pdf2image.exceptions import PDFPageCountError, PDFSyntaxError
    except ImportError:
        raise ImportError(
            "pdf2image is required. Install with: pip install pdf2image\n"
            "Also ensure poppler is installed on your system."
        )

    try:
        logger.info(f"Converting PDF to images: {pdf_path} at {dpi} DPI")

        pil_images = convert_from_path(
            pdf_path,
            dpi=dpi,
            first_page=first_page,
            last_page=last_page,
            fmt='png',
            grayscale=True
        )

        images = [np.array(pil_img.convert("L")) for pil_img in pil_images]

        logger.info(f"Converted {len(images)} pages from PDF")
        return images

    except (PDFPageCountError, PDFSyntaxError) as e:
        raise RuntimeError(f"Failed to parse PDF: {e}")
    except Exception as e:
        if "poppler" in str(e).lower():
            raise RuntimeError(
                "Poppler is not installed. Install with:\n"
                "  macOS: brew install poppler\n"
                "  Linux: sudo apt-get install poppler-utils"
            )
        raise


# ============================================================================
# Image Loading
# ============================================================================

def load_image(
    image_path: Union[str, Path],
    grayscale: bool = True
) -> np.ndarray:
    """
    Load an image from file.

    Args:
        image_path: Path to the image file
        grayscale: If True, load as grayscale

    Returns:
        Numpy array representing the image (BGR format if color)

    Raises:
        FileNotFoundError: If image file doesn't exist
        ValueError: If image cannot be decoded
    """
    import cv2

    image_path = Path(image_path)
    if not image_path.exists():
        raise FileNotFoundError(f"Image file not found: {image_path}")

    flag = cv2.IMREAD_GRAYSCALE if grayscale else cv2.IMREAD_COLOR
    img = cv2.imread(str(image_path), flag)

    if img is None:
        raise ValueError(f"Could not decode image: {image_path}")

    logger.debug(f"Loaded image: {image_path}, shape: {img.shape}")
    return img


def list_images(folder_path: Union[str, Path]) -> List[Path]:
    """Image files of a folder, sorted by name."""
    folder_path = Path(folder_path)
    if not folder_path.is_dir():
        raise NotADirectoryError(f"Not a directory: {folder_path}")

    return sorted(
        f for f in folder_path.iterdir()
        if f.suffix.lower() in IMAGE_EXTENSIONS
    )


def load_pages(input_path: Union[str, Path], dpi: int = 300) -> List[Tuple[str, np.ndarray]]:
    """
    Load every page of an image, a folder of images, or a PDF.

    Args:
        input_path: Image file, image folder or PDF
        dpi: Rendering resolution for PDFs

    Returns:
        List of (page name, grayscale image)
    """
    input_path = Path(input_path)
    input_type = detect_input_type(input_path)

    if input_type == "pdf":
        return [
            (f"{input_path.stem}_page{i + 1:04d}", page)
            for i, page in enumerate(load_pdf(input_path, dpi=dpi))
        ]
    if input_type == "image":
        return [(input_path.stem, load_image(input_path))]
    if input_type == "image_folder":
        pages = []
        for img_path in list_images(input_path):
            try:
                pages.append((img_path.stem, load_image(img_path)))
            except ValueError as e:
                logger.warning(f"Failed to load {img_path}: {e}")
        return pages

    raise ValueError(f"Unsupported input: {input_path}")


def save_image(
    image: np.ndarray,
    output_path: Union[str, Path]
) -> Path:
    """
    Save an image to file.

    Args:
        image: Numpy array representing the image
        output_path: Path to save the image

    Returns:
        Path to the saved image
    """
    import cv2

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    if not cv2.imwrite(str(output_path), image):
        raise ValueError(f"Could not encode image: {output_path}")

    logger.debug(f"Saved image: {output_path}")
    return output_path


# ============================================================================
# JSON Serialization
# ============================================================================

class EnhancedJSONEncoder(json.JSONEncoder):
    """JSON encoder that handles numpy values, enums and dataclasses."""

    def default(self, obj):
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, np.floating):
            return float(obj)
        if isinstance(obj, Enum):
            return obj.value
        if hasattr(obj, '__dataclass_fields__'):
            return asdict(obj)
        if isinstance(obj, Path):
            return str(obj)
        return super().default(obj)


def save_json(
    data: Any,
    output_path: Union[str, Path],
    indent: int = 2
) -> Path:
    """
    Save data to a JSON file.

    Args:
        data: Data to serialize (dict, list, dataclass, etc.)
        output_path: Path to save the JSON file
        indent: Indentation level for pretty printing

    Returns:
        Path to the saved file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=indent, cls=EnhancedJSONEncoder)

    logger.debug(f"Saved JSON: {output_path}")
    return output_path


def load_json(json_path: Union[str, Path]) -> Any:
    """Load data from a JSON file."""
    json_path = Path(json_path)
    if not json_path.exists():
        raise FileNotFoundError(f"JSON file not found: {json_path}")

    with open(json_path, 'r', encoding='utf-8') as f:
        return json.load(f)


# ============================================================================
# Directory Management
# ============================================================================

def ensure_dir(path: Union[str, Path]) -> Path:
    """Ensure a directory exists, creating it if necessary."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


# ============================================================================
# File Type Detection
# ============================================================================

def detect_input_type(input_path: Union[str, Path]) -> str:
    """
    Detect the type of input file or directory.

    Args:
        input_path: Path to file or directory

    Returns:
        One of: 'pdf', 'image', 'image_folder', 'unknown'
    """
    input_path = Path(input_path)

    if input_path.is_dir():
        has_images = any(
            f.suffix.lower() in IMAGE_EXTENSIONS
            for f in input_path.iterdir()
        )
        return 'image_folder' if has_images else 'unknown'

    if not input_path.exists():
        return 'unknown'

    suffix = input_path.suffix.lower()
    if suffix == '.pdf':
        return 'pdf'
    elif suffix in IMAGE_EXTENSIONS:
        return 'image'

    return 'unknown'
