"""
nuScenes metadata loader

Reads the JSON tables of one dataset version, validates their cross
references and exposes them as an immutable, navigable ``Dataset``.
"""
import logging

from .models import *  # noqa: F401,F403
from .models import __all__ as _models_all
from .exceptions import (
    CorruptedDatasetError,
    DatasetFileError,
    DatasetIOError,
    InternalBugError,
    MalformedInputError,
    NuScenesDataError,
    TokenParseError,
)
from .config import LoaderConfig
from .tables import RawTables, index_records, load_table, load_tables
from .integrity import check_integrity
from .indexer import build_dataset
from .dataset import Dataset
from .refs import (
    AttributeRef,
    CalibratedSensorRef,
    CategoryRef,
    EgoPoseRef,
    InstanceRef,
    LogRef,
    MapRef,
    RecordRef,
    SampleAnnotationRef,
    SampleDataRef,
    SampleRef,
    SceneRef,
    SensorRef,
    VisibilityRef,
)
from .loader import DatasetLoader, load
from .version import SDK_VERSION

__version__ = SDK_VERSION

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = list(_models_all) + [
    # Errors
    "NuScenesDataError",
    "DatasetFileError",
    "DatasetIOError",
    "MalformedInputError",
    "CorruptedDatasetError",
    "TokenParseError",
    "InternalBugError",
    # Loading
    "LoaderConfig",
    "DatasetLoader",
    "load",
    "load_table",
    "load_tables",
    "index_records",
    "RawTables",
    "check_integrity",
    "build_dataset",
    # Dataset
    "Dataset",
    "RecordRef",
    "AttributeRef",
    "CalibratedSensorRef",
    "CategoryRef",
    "EgoPoseRef",
    "InstanceRef",
    "LogRef",
    "MapRef",
    "SampleAnnotationRef",
    "SampleDataRef",
    "SampleRef",
    "SceneRef",
    "SensorRef",
    "VisibilityRef",
]
