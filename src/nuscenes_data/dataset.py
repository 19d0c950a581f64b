"""The loaded dataset: every record and derived index, owned as one unit"""
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Sequence, Union

from .models import (
    AttributeModel,
    CalibratedSensorModel,
    CategoryModel,
    EgoPoseModel,
    IndexedInstance,
    IndexedSample,
    IndexedScene,
    LogModel,
    MapModel,
    SampleAnnotationModel,
    SampleDataModel,
    SensorModel,
    TableName,
    Token,
    VisibilityModel,
    VisibilityToken,
    as_token,
    as_visibility_token,
)
from .refs import (
    AttributeRef,
    CalibratedSensorRef,
    CategoryRef,
    EgoPoseRef,
    InstanceRef,
    LogRef,
    MapRef,
    SampleAnnotationRef,
    SampleDataRef,
    SampleRef,
    SceneRef,
    SensorRef,
    VisibilityRef,
)

TokenLike = Union[Token, str]


class Dataset:
    """Immutable arena produced by the loader.

    Lookups return ``None`` for unknown tokens. Iterators yield reference
    handles; ``sorted_*_iter`` variants follow timestamp order.
    """

    def __init__(
        self,
        version: str,
        dataset_dir: Path,
        attribute_map: Dict[Token, AttributeModel],
        calibrated_sensor_map: Dict[Token, CalibratedSensorModel],
        category_map: Dict[Token, CategoryModel],
        ego_pose_map: Dict[Token, EgoPoseModel],
        instance_map: Dict[Token, IndexedInstance],
        log_map: Dict[Token, LogModel],
        map_map: Dict[Token, MapModel],
        sample_map: Dict[Token, IndexedSample],
        sample_annotation_map: Dict[Token, SampleAnnotationModel],
        sample_data_map: Dict[Token, SampleDataModel],
        scene_map: Dict[Token, IndexedScene],
        sensor_map: Dict[Token, SensorModel],
        visibility_map: Dict[VisibilityToken, VisibilityModel],
        sorted_ego_pose_tokens: Sequence[Token],
        sorted_sample_tokens: Sequence[Token],
        sorted_sample_data_tokens: Sequence[Token],
        sorted_scene_tokens: Sequence[Token],
    ):
        self._version = version
        self._dataset_dir = Path(dataset_dir)
        self._attribute_map = MappingProxyType(attribute_map)
        self._calibrated_sensor_map = MappingProxyType(calibrated_sensor_map)
        self._category_map = MappingProxyType(category_map)
        self._ego_pose_map = MappingProxyType(ego_pose_map)
        self._instance_map = MappingProxyType(instance_map)
        self._log_map = MappingProxyType(log_map)
        self._map_map = MappingProxyType(map_map)
        self._sample_map = MappingProxyType(sample_map)
        self._sample_annotation_map = MappingProxyType(sample_annotation_map)
        self._sample_data_map = MappingProxyType(sample_data_map)
        self._scene_map = MappingProxyType(scene_map)
        self._sensor_map = MappingProxyType(sensor_map)
        self._visibility_map = MappingProxyType(visibility_map)
        self._sorted_ego_pose_tokens = tuple(sorted_ego_pose_tokens)
        self._sorted_sample_tokens = tuple(sorted_sample_tokens)
        self._sorted_sample_data_tokens = tuple(sorted_sample_data_tokens)
        self._sorted_scene_tokens = tuple(sorted_scene_tokens)

    @classmethod
    def load(
        cls,
        version: str,
        dataset_dir: Union[str, Path],
        check: bool = True,
        max_workers: Optional[int] = None,
    ) -> "Dataset":
        from .loader import load

        return load(version, dataset_dir, check=check, max_workers=max_workers)

    @property
    def version(self) -> str:
        return self._version

    @property
    def dataset_dir(self) -> Path:
        return self._dataset_dir

    @property
    def meta_dir(self) -> Path:
        return self._dataset_dir / self._version

    @property
    def sorted_ego_pose_tokens(self) -> Sequence[Token]:
        return self._sorted_ego_pose_tokens

    @property
    def sorted_sample_tokens(self) -> Sequence[Token]:
        return self._sorted_sample_tokens

    @property
    def sorted_sample_data_tokens(self) -> Sequence[Token]:
        return self._sorted_sample_data_tokens

    @property
    def sorted_scene_tokens(self) -> Sequence[Token]:
        return self._sorted_scene_tokens

    def _table(self, table: TableName) -> Mapping:
        return getattr(self, f"_{table.value}_map")

    def count(self, table: Union[TableName, str]) -> int:
        return len(self._table(TableName(table)))

    def __repr__(self):
        return (
            f"Dataset(version='{self._version}', dataset_dir='{self._dataset_dir}', "
            f"scenes={len(self._scene_map)}, samples={len(self._sample_map)})"
        )

    # Lookups

    def attribute(self, token: TokenLike) -> Optional[AttributeRef]:
        record = self._attribute_map.get(as_token(token))
        return None if record is None else AttributeRef(self, record)

    def calibrated_sensor(self, token: TokenLike) -> Optional[CalibratedSensorRef]:
        record = self._calibrated_sensor_map.get(as_token(token))
        return None if record is None else CalibratedSensorRef(self, record)

    def category(self, token: TokenLike) -> Optional[CategoryRef]:
        record = self._category_map.get(as_token(token))
        return None if record is None else CategoryRef(self, record)

    def ego_pose(self, token: TokenLike) -> Optional[EgoPoseRef]:
        record = self._ego_pose_map.get(as_token(token))
        return None if record is None else EgoPoseRef(self, record)

    def instance(self, token: TokenLike) -> Optional[InstanceRef]:
        record = self._instance_map.get(as_token(token))
        return None if record is None else InstanceRef(self, record)

    def log(self, token: TokenLike) -> Optional[LogRef]:
        record = self._log_map.get(as_token(token))
        return None if record is None else LogRef(self, record)

    def map(self, token: TokenLike) -> Optional[MapRef]:
        record = self._map_map.get(as_token(token))
        return None if record is None else MapRef(self, record)

    def sample(self, token: TokenLike) -> Optional[SampleRef]:
        record = self._sample_map.get(as_token(token))
        return None if record is None else SampleRef(self, record)

    def sample_annotation(self, token: TokenLike) -> Optional[SampleAnnotationRef]:
        record = self._sample_annotation_map.get(as_token(token))
        return None if record is None else SampleAnnotationRef(self, record)

    def sample_data(self, token: TokenLike) -> Optional[SampleDataRef]:
        record = self._sample_data_map.get(as_token(token))
        return None if record is None else SampleDataRef(self, record)

    def scene(self, token: TokenLike) -> Optional[SceneRef]:
        record = self._scene_map.get(as_token(token))
        return None if record is None else SceneRef(self, record)

    def sensor(self, token: TokenLike) -> Optional[SensorRef]:
        record = self._sensor_map.get(as_token(token))
        return None if record is None else SensorRef(self, record)

    def visibility(self, token: Union[VisibilityToken, int, str]) -> Optional[VisibilityRef]:
        record = self._visibility_map.get(as_visibility_token(token))
        return None if record is None else VisibilityRef(self, record)

    # Iteration in table order

    def attribute_iter(self) -> Iterator[AttributeRef]:
        return (AttributeRef(self, record) for record in self._attribute_map.values())

    def calibrated_sensor_iter(self) -> Iterator[CalibratedSensorRef]:
        return (CalibratedSensorRef(self, record) for record in self._calibrated_sensor_map.values())

    def category_iter(self) -> Iterator[CategoryRef]:
        return (CategoryRef(self, record) for record in self._category_map.values())

    def ego_pose_iter(self) -> Iterator[EgoPoseRef]:
        return (EgoPoseRef(self, record) for record in self._ego_pose_map.values())

    def instance_iter(self) -> Iterator[InstanceRef]:
        return (InstanceRef(self, record) for record in self._instance_map.values())

    def log_iter(self) -> Iterator[LogRef]:
        return (LogRef(self, record) for record in self._log_map.values())

    def map_iter(self) -> Iterator[MapRef]:
        return (MapRef(self, record) for record in self._map_map.values())

    def sample_iter(self) -> Iterator[SampleRef]:
        return (SampleRef(self, record) for record in self._sample_map.values())

    def sample_annotation_iter(self) -> Iterator[SampleAnnotationRef]:
        return (SampleAnnotationRef(self, record) for record in self._sample_annotation_map.values())

    def sample_data_iter(self) -> Iterator[SampleDataRef]:
        return (SampleDataRef(self, record) for record in self._sample_data_map.values())

    def scene_iter(self) -> Iterator[SceneRef]:
        return (SceneRef(self, record) for record in self._scene_map.values())

    def sensor_iter(self) -> Iterator[SensorRef]:
        return (SensorRef(self, record) for record in self._sensor_map.values())

    def visibility_iter(self) -> Iterator[VisibilityRef]:
        return (VisibilityRef(self, record) for record in self._visibility_map.values())

    # Chronological iteration

    def sorted_ego_pose_iter(self) -> Iterator[EgoPoseRef]:
        return (EgoPoseRef(self, self._ego_pose_map[t]) for t in self._sorted_ego_pose_tokens)

    def sorted_sample_iter(self) -> Iterator[SampleRef]:
        return (SampleRef(self, self._sample_map[t]) for t in self._sorted_sample_tokens)

    def sorted_sample_data_iter(self) -> Iterator[SampleDataRef]:
        return (
            SampleDataRef(self, self._sample_data_map[t]) for t in self._sorted_sample_data_tokens
        )

    def sorted_scene_iter(self) -> Iterator[SceneRef]:
        return (SceneRef(self, self._scene_map[t]) for t in self._sorted_scene_tokens)
