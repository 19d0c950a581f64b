"""
File loading: one JSON file per table, decoded into records and indexed by token
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, TypeVar, Union

from pydantic import BaseModel, TypeAdapter, ValidationError

from .exceptions import CorruptedDatasetError, DatasetIOError, MalformedInputError
from .models import (
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
    TableName,
    TABLE_MODELS,
    Token,
    VisibilityModel,
    VisibilityToken,
)
from .utils import fork_join

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

_ADAPTERS: Dict[TableName, TypeAdapter] = {
    table: TypeAdapter(List[model]) for table, model in TABLE_MODELS.items()
}


@dataclass(frozen=True)
class RawTables:
    """The 13 token-keyed tables as read from disk"""

    attribute: Dict[Token, AttributeModel]
    calibrated_sensor: Dict[Token, CalibratedSensorModel]
    category: Dict[Token, CategoryModel]
    ego_pose: Dict[Token, EgoPoseModel]
    instance: Dict[Token, InstanceModel]
    log: Dict[Token, LogModel]
    map: Dict[Token, MapModel]
    sample: Dict[Token, SampleModel]
    sample_annotation: Dict[Token, SampleAnnotationModel]
    sample_data: Dict[Token, SampleDataModel]
    scene: Dict[Token, SceneModel]
    sensor: Dict[Token, SensorModel]
    visibility: Dict[VisibilityToken, VisibilityModel]


def load_table(path: Union[str, Path], table: TableName) -> List[BaseModel]:
    """Read one table file into a list of records.

    Raises:
        DatasetIOError: the file is missing or unreadable
        MalformedInputError: invalid JSON or a field violating its encoding
    """
    path = Path(path)
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise DatasetIOError(path, e) from e

    try:
        records = _ADAPTERS[table].validate_json(data)
    except ValidationError as e:
        raise MalformedInputError(path, e) from e
    logger.debug(f"Loaded {len(records)} records from {path}")
    return records


def index_records(records: Sequence[M], table: Union[TableName, str] = "") -> Dict:
    """Key records by token; a token seen twice in one table is an error"""
    index: Dict = {}
    for record in records:
        if record.token in index:
            name = table.value if isinstance(table, TableName) else table
            raise CorruptedDatasetError(
                f"the token {record.token} appears more than once in table {name or '?'}",
                {"table": name, "token": str(record.token)},
            )
        index[record.token] = record
    return index


def load_indexed_table(meta_dir: Path, table: TableName) -> Dict:
    records = load_table(meta_dir / table.filename, table)
    return index_records(records, table)


def load_tables(meta_dir: Union[str, Path], max_workers: Optional[int] = None) -> RawTables:
    """Load all table files of a version directory, one task per file"""
    meta_dir = Path(meta_dir)
    tables = list(TableName)
    maps = fork_join(
        [lambda table=table: load_indexed_table(meta_dir, table) for table in tables],
        max_workers=max_workers,
    )
    return RawTables(**{table.value: index for table, index in zip(tables, maps)})
