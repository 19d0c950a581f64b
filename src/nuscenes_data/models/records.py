"""Pydantic schema for the raw dataset tables.

Field sets follow the official table layout. Wire encodings that are not
plain JSON (hex tokens, empty-string-as-absent, microsecond timestamps, the
0-or-3-row camera intrinsic) are expressed as reusable annotated types.
"""
from __future__ import annotations

from datetime import date
from pathlib import PurePosixPath
from typing import Annotated, Any, Dict, List, Optional, Tuple, Type

import numpy as np
from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    PlainValidator,
)

from .enums import Channel, FileFormat, Modality, TableName, VisibilityLevel
from .token import Token, VisibilityToken


def _empty_as_none(value: Any) -> Any:
    if value is None or value == "":
        return None
    return value


def _parse_timestamp(value: Any) -> np.datetime64:
    """Microseconds since epoch -> datetime64 with nanosecond unit"""
    if isinstance(value, np.datetime64):
        return value.astype("datetime64[ns]")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"timestamp must be a number of microseconds, got {value!r}")
    try:
        if isinstance(value, int):
            nanos = value * 1000
        else:
            nanos = int(value * 1000.0)
        return np.datetime64(nanos, "ns")
    except (OverflowError, ValueError) as e:
        raise ValueError(f"timestamp {value!r} is out of range: {e}") from e


def _serialize_timestamp(value: np.datetime64) -> float:
    return value.astype("datetime64[ns]").astype(np.int64).item() / 1000.0


def _parse_camera_intrinsic(value: Any) -> Any:
    if value is None:
        return None
    if not isinstance(value, (list, tuple)):
        raise ValueError("expected an empty array or a 3x3 two-dimensional array")
    if len(value) == 0:
        return None
    if len(value) != 3:
        raise ValueError(
            f"invalid length {len(value)}, expected an empty array or a 3x3 two-dimensional array"
        )
    return value


def _serialize_camera_intrinsic(value: Optional[Tuple]) -> List[List[float]]:
    if value is None:
        return []
    return [list(row) for row in value]


Vector3 = Tuple[float, float, float]
Quaternion = Tuple[float, float, float, float]  # w, x, y, z
Matrix3 = Tuple[Vector3, Vector3, Vector3]

Timestamp = Annotated[
    np.datetime64,
    PlainValidator(_parse_timestamp),
    PlainSerializer(_serialize_timestamp),
]
OptionalToken = Annotated[
    Optional[Token],
    BeforeValidator(_empty_as_none),
    PlainSerializer(lambda t: "" if t is None else str(t)),
]
OptionalPath = Annotated[
    Optional[PurePosixPath],
    BeforeValidator(_empty_as_none),
    PlainSerializer(lambda p: "" if p is None else str(p)),
]
CameraIntrinsic = Annotated[
    Optional[Matrix3],
    BeforeValidator(_parse_camera_intrinsic),
    PlainSerializer(_serialize_camera_intrinsic),
]


class _RecordModel(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class _TokenModel(_RecordModel):
    token: Token


class AttributeModel(_TokenModel):
    name: str
    description: str


class CalibratedSensorModel(_TokenModel):
    sensor_token: Token
    translation: Vector3
    rotation: Quaternion
    camera_intrinsic: CameraIntrinsic = None


class CategoryModel(_TokenModel):
    name: str
    description: str


class EgoPoseModel(_TokenModel):
    timestamp: Timestamp
    rotation: Quaternion
    translation: Vector3


class InstanceModel(_TokenModel):
    category_token: Token
    nbr_annotations: int = Field(ge=0)
    first_annotation_token: Token
    last_annotation_token: Token


class LogModel(_TokenModel):
    logfile: OptionalPath = None
    vehicle: str
    date_captured: date
    location: str


class MapModel(_TokenModel):
    log_tokens: Tuple[Token, ...]
    category: str
    filename: PurePosixPath


class SampleModel(_TokenModel):
    timestamp: Timestamp
    scene_token: Token
    prev: OptionalToken = None
    next: OptionalToken = None


class SampleAnnotationModel(_TokenModel):
    sample_token: Token
    instance_token: Token
    attribute_tokens: Tuple[Token, ...]
    visibility_token: Annotated[Optional[VisibilityToken], BeforeValidator(_empty_as_none)] = None
    translation: Vector3
    size: Vector3  # w, l, h
    rotation: Quaternion
    num_lidar_pts: int
    num_radar_pts: int
    prev: OptionalToken = None
    next: OptionalToken = None


class SampleDataModel(_TokenModel):
    sample_token: Token
    ego_pose_token: Token
    calibrated_sensor_token: Token
    timestamp: Timestamp
    fileformat: FileFormat
    is_key_frame: bool
    filename: PurePosixPath
    height: Optional[int] = None
    width: Optional[int] = None
    prev: OptionalToken = None
    next: OptionalToken = None


class SceneModel(_TokenModel):
    name: str
    description: str
    log_token: Token
    nbr_samples: int = Field(ge=0)
    first_sample_token: Token
    last_sample_token: Token


class SensorModel(_TokenModel):
    channel: Channel
    modality: Modality


class VisibilityModel(_RecordModel):
    token: VisibilityToken
    level: VisibilityLevel
    description: str


TABLE_MODELS: Dict[TableName, Type[_RecordModel]] = {
    TableName.ATTRIBUTE: AttributeModel,
    TableName.CALIBRATED_SENSOR: CalibratedSensorModel,
    TableName.CATEGORY: CategoryModel,
    TableName.EGO_POSE: EgoPoseModel,
    TableName.INSTANCE: InstanceModel,
    TableName.LOG: LogModel,
    TableName.MAP: MapModel,
    TableName.SAMPLE: SampleModel,
    TableName.SAMPLE_ANNOTATION: SampleAnnotationModel,
    TableName.SAMPLE_DATA: SampleDataModel,
    TableName.SCENE: SceneModel,
    TableName.SENSOR: SensorModel,
    TableName.VISIBILITY: VisibilityModel,
}
