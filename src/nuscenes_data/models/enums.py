from enum import Enum


class ErrorCode(str, Enum):
    IO = "IO"
    MALFORMED_INPUT = "MALFORMED_INPUT"
    CORRUPTED_DATASET = "CORRUPTED_DATASET"
    PARSE = "PARSE"
    INTERNAL_BUG = "INTERNAL_BUG"


class TableName(str, Enum):
    """Dataset tables; the value is the JSON file stem"""

    ATTRIBUTE = "attribute"
    CALIBRATED_SENSOR = "calibrated_sensor"
    CATEGORY = "category"
    EGO_POSE = "ego_pose"
    INSTANCE = "instance"
    LOG = "log"
    MAP = "map"
    SAMPLE = "sample"
    SAMPLE_ANNOTATION = "sample_annotation"
    SAMPLE_DATA = "sample_data"
    SCENE = "scene"
    SENSOR = "sensor"
    VISIBILITY = "visibility"

    @property
    def filename(self) -> str:
        return f"{self.value}.json"


class Modality(str, Enum):
    CAMERA = "camera"
    LIDAR = "lidar"
    RADAR = "radar"


class FileFormat(str, Enum):
    JPG = "jpg"
    PNG = "png"
    PCD = "pcd"
    BIN = "bin"

    @property
    def is_image(self) -> bool:
        return self in (FileFormat.JPG, FileFormat.PNG)

    @property
    def is_point_cloud(self) -> bool:
        return self in (FileFormat.PCD, FileFormat.BIN)


class VisibilityLevel(str, Enum):
    """Fraction of the annotation visible across all camera images"""

    V0_40 = "v0-40"
    V40_60 = "v40-60"
    V60_80 = "v60-80"
    V80_100 = "v80-100"


class Channel(str, Enum):
    CAM_BACK = "CAM_BACK"
    CAM_BACK_LEFT = "CAM_BACK_LEFT"
    CAM_BACK_RIGHT = "CAM_BACK_RIGHT"
    CAM_FRONT = "CAM_FRONT"
    CAM_FRONT_LEFT = "CAM_FRONT_LEFT"
    CAM_FRONT_RIGHT = "CAM_FRONT_RIGHT"
    CAM_FRONT_ZOOMED = "CAM_FRONT_ZOOMED"
    LIDAR_TOP = "LIDAR_TOP"
    RADAR_FRONT = "RADAR_FRONT"
    RADAR_FRONT_LEFT = "RADAR_FRONT_LEFT"
    RADAR_FRONT_RIGHT = "RADAR_FRONT_RIGHT"
    RADAR_BACK_LEFT = "RADAR_BACK_LEFT"
    RADAR_BACK_RIGHT = "RADAR_BACK_RIGHT"
