"""
Decoders for the files sample data and map records point at
"""
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import cv2
import numpy as np
from pypcd import pypcd

from .exceptions import DatasetIOError, MalformedInputError
from .refs import MapRef, SampleDataRef

logger = logging.getLogger(__name__)

# x, y, z, intensity, ring index
POINT_DIMS = 5

_IMREAD_FLAGS: Dict[str, int] = {
    "bgr": cv2.IMREAD_COLOR,
    "rgb": cv2.IMREAD_COLOR,
    "gray": cv2.IMREAD_GRAYSCALE,
    "unchanged": cv2.IMREAD_UNCHANGED,
}


def _read_bytes(path: Path) -> bytes:
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise DatasetIOError(path, e) from e


def decode_point_cloud(data: bytes, path: Union[str, Path]) -> np.ndarray:
    """Decode a little-endian float32 buffer into an (N, 5) array"""
    if len(data) % 4 != 0:
        raise MalformedInputError(
            path, message=f"point cloud {path} has {len(data)} bytes, not a multiple of 4"
        )
    points = np.frombuffer(data, dtype="<f4")
    if points.size % POINT_DIMS != 0:
        raise MalformedInputError(
            path,
            message=f"point cloud {path} has {points.size} floats, not a multiple of {POINT_DIMS}",
        )
    return points.reshape(-1, POINT_DIMS)


def load_point_cloud(sample_data: SampleDataRef) -> Optional[np.ndarray]:
    """
    Read the lidar sweep a sample data record points at

    Returns:
        (N, 5) float32 array, or None when the record is not a binary point cloud

    Raises:
        DatasetIOError: the file cannot be read
        MalformedInputError: the buffer size does not match whole points
    """
    if not sample_data.fileformat.is_point_cloud:
        return None
    path = sample_data.path()
    # radar sweeps carry a PCD header, see load_pcd
    if path.suffix != ".bin":
        logger.debug(f"Skipping non-binary point cloud {path}")
        return None
    return decode_point_cloud(_read_bytes(path), path)


def decode_image(data: bytes, path: Union[str, Path], color: str = "rgb") -> np.ndarray:
    """Decode encoded image bytes with OpenCV"""
    if color not in _IMREAD_FLAGS:
        raise ValueError(f"unsupported color mode {color!r}, expected one of {sorted(_IMREAD_FLAGS)}")
    img = cv2.imdecode(np.frombuffer(data, np.uint8), _IMREAD_FLAGS[color])
    if img is None:
        raise MalformedInputError(path, message=f"cv2.imdecode failed for {path}")

    if color == "rgb" and img.ndim == 3:
        img = cv2.cvtColor(img, cv2.COLOR_BGR2RGB)
    return img


def load_image(obj: Union[SampleDataRef, MapRef, Any], color: str = "rgb") -> Optional[np.ndarray]:
    """
    Read the image a sample data or map record points at

    Args:
        obj: a SampleDataRef, or a MapRef for the rasterized map mask
        color: 'rgb' (default), 'bgr', 'gray' or 'unchanged'

    Returns:
        (H, W, C) or (H, W) uint8 array, or None for non-image sample data
    """
    if isinstance(obj, SampleDataRef) and not obj.fileformat.is_image:
        return None
    path = obj.path()
    return decode_image(_read_bytes(path), path, color)


def decode_pcd(data: bytes, path: Union[str, Path]) -> np.ndarray:
    """Decode a PCD file into a structured array with one field per PCD field"""
    # the header ends with a DATA line; without it the reader never stops
    if b"\nDATA " not in data[:4096]:
        raise MalformedInputError(path, message=f"{path} has no PCD DATA header line")
    try:
        pc = pypcd.PointCloud.from_bytes(data)
    except Exception as e:
        raise MalformedInputError(path, e) from e
    return pc.pc_data


def load_pcd(sample_data: SampleDataRef) -> Optional[np.ndarray]:
    """
    Read the radar sweep a sample data record points at

    Returns:
        structured array (x, y, z, dyn_prop, id, rcs, vx, vy, ... vy_rms for
        nuScenes radars), or None when the record is not a PCD file

    Raises:
        DatasetIOError: the file cannot be read
        MalformedInputError: the PCD header or body does not decode
    """
    if not sample_data.fileformat.is_point_cloud:
        return None
    path = sample_data.path()
    if path.suffix != ".pcd":
        return None
    return decode_pcd(_read_bytes(path), path)
