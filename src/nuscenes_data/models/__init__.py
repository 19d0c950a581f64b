"""
Dataset schema models
"""

from .enums import (
    Channel,
    ErrorCode,
    FileFormat,
    Modality,
    TableName,
    VisibilityLevel,
)
from .token import TOKEN_LENGTH, Token, VisibilityToken, as_token, as_visibility_token
from .records import (
    AttributeModel,
    CalibratedSensorModel,
    CategoryModel,
    EgoPoseModel,
    InstanceModel,
    LogModel,
    MapModel,
    SampleAnnotationModel,
    SampleDataModel,
    SampleModel,
    SceneModel,
    SensorModel,
    VisibilityModel,
    TABLE_MODELS,
)
from .indexed import IndexedInstance, IndexedSample, IndexedScene

__all__ = [
    # Enums
    "Channel",
    "ErrorCode",
    "FileFormat",
    "Modality",
    "TableName",
    "VisibilityLevel",
    # Tokens
    "TOKEN_LENGTH",
    "Token",
    "VisibilityToken",
    "as_token",
    "as_visibility_token",
    # Raw records
    "AttributeModel",
    "CalibratedSensorModel",
    "CategoryModel",
    "EgoPoseModel",
    "InstanceModel",
    "LogModel",
    "MapModel",
    "SampleAnnotationModel",
    "SampleDataModel",
    "SampleModel",
    "SceneModel",
    "SensorModel",
    "VisibilityModel",
    "TABLE_MODELS",
    # Indexed records
    "IndexedInstance",
    "IndexedSample",
    "IndexedScene",
]
