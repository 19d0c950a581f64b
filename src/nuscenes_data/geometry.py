"""
Geometry helpers turning record fields into numpy/scipy objects.

Records store quaternions as ``[w, x, y, z]``; scipy expects ``[x, y, z, w]``.
Every function accepts either a raw record or a reference handle.
"""
from typing import Any, Optional, Sequence

import numpy as np
from scipy.spatial.transform import Rotation as R


def _quat_wxyz_to_xyzw(q: Sequence[float]) -> list:
    return [q[1], q[2], q[3], q[0]]


def _quat_xyzw_to_wxyz(q: Sequence[float]) -> list:
    return [q[3], q[0], q[1], q[2]]


def quaternion_to_rotation(q: Sequence[float]) -> R:
    """Convert a ``[w, x, y, z]`` quaternion into a scipy rotation"""
    return R.from_quat(_quat_wxyz_to_xyzw(q))


def rotation_to_quaternion(rotation: R) -> list:
    """Inverse of ``quaternion_to_rotation``, returns ``[w, x, y, z]``"""
    return _quat_xyzw_to_wxyz(rotation.as_quat().tolist())


def translation_vector(t: Sequence[float]) -> np.ndarray:
    return np.array(t, dtype=float)


def transform_matrix(
    rotation: Sequence[float], translation: Sequence[float], inverse: bool = False
) -> np.ndarray:
    """
    Build a 4x4 homogeneous transform

    Args:
        rotation: quaternion as [w, x, y, z]
        translation: [x, y, z]
        inverse: return the transform from the target frame back to the source frame

    Returns:
        4x4 float matrix
    """
    rot = quaternion_to_rotation(rotation).as_matrix()
    t = translation_vector(translation)
    tm = np.eye(4)
    if inverse:
        rot_inv = rot.T
        tm[:3, :3] = rot_inv
        tm[:3, 3] = rot_inv.dot(-t)
    else:
        tm[:3, :3] = rot
        tm[:3, 3] = t
    return tm


def camera_intrinsic_matrix(calibrated_sensor: Any) -> Optional[np.ndarray]:
    """3x3 intrinsic matrix, or None for non-camera sensors"""
    if calibrated_sensor.camera_intrinsic is None:
        return None
    return np.array(calibrated_sensor.camera_intrinsic, dtype=float)


def ego_pose_transform(ego_pose: Any, inverse: bool = False) -> np.ndarray:
    """Ego vehicle frame to global frame"""
    return transform_matrix(ego_pose.rotation, ego_pose.translation, inverse=inverse)


def calibrated_sensor_transform(calibrated_sensor: Any, inverse: bool = False) -> np.ndarray:
    """Sensor frame to ego vehicle frame"""
    return transform_matrix(calibrated_sensor.rotation, calibrated_sensor.translation, inverse=inverse)


def annotation_transform(annotation: Any, inverse: bool = False) -> np.ndarray:
    """Box frame to global frame"""
    return transform_matrix(annotation.rotation, annotation.translation, inverse=inverse)


def annotation_size(annotation: Any) -> np.ndarray:
    # width, length, height
    return np.array(annotation.size, dtype=float)
