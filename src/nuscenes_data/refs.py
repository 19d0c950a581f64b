"""Reference handles into a loaded dataset.

A handle pairs the owning ``Dataset`` with one record inside it. Record
fields are readable directly on the handle; navigation methods follow the
stored foreign-key tokens through the dataset. Handles are cheap to create
and safe to share between threads since the dataset never changes.

Note that on chained records ``handle.next`` and ``handle.prev`` are
navigation methods; the raw tokens stay available as ``handle.record.next``
and ``handle.record.prev``.
"""
from pathlib import Path
from typing import TYPE_CHECKING, Any, Generic, Iterator, Optional, TypeVar

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
    VisibilityModel,
)

if TYPE_CHECKING:
    from .dataset import Dataset

R = TypeVar("R")


class RecordRef(Generic[R]):
    __slots__ = ("_dataset", "_record")

    def __init__(self, dataset: "Dataset", record: R):
        object.__setattr__(self, "_dataset", dataset)
        object.__setattr__(self, "_record", record)

    @property
    def record(self) -> R:
        return self._record

    @property
    def token(self):
        return self._record.token

    def dataset(self) -> "Dataset":
        return self._dataset

    def __getattr__(self, name: str) -> Any:
        # only reached when normal lookup fails: delegate to the record fields
        if name.startswith("__") or name in ("_dataset", "_record"):
            raise AttributeError(name)
        return getattr(self._record, name)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is read-only")

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __reduce__(self):
        return (type(self), (self._dataset, self._record))

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self._dataset is other._dataset and self.token == other.token

    def __hash__(self):
        return hash((type(self).__name__, id(self._dataset), self.token))

    def __repr__(self):
        return f"{type(self).__name__}(token='{self.token}')"


class AttributeRef(RecordRef[AttributeModel]):
    __slots__ = ()


class CategoryRef(RecordRef[CategoryModel]):
    __slots__ = ()


class EgoPoseRef(RecordRef[EgoPoseModel]):
    __slots__ = ()


class SensorRef(RecordRef[SensorModel]):
    __slots__ = ()


class VisibilityRef(RecordRef[VisibilityModel]):
    __slots__ = ()


class CalibratedSensorRef(RecordRef[CalibratedSensorModel]):
    __slots__ = ()

    def sensor(self) -> SensorRef:
        return SensorRef(self._dataset, self._dataset._sensor_map[self._record.sensor_token])


class LogRef(RecordRef[LogModel]):
    __slots__ = ()

    def logfile_path(self) -> Optional[Path]:
        if self._record.logfile is None:
            return None
        return self._dataset.dataset_dir / self._record.logfile


class MapRef(RecordRef[MapModel]):
    __slots__ = ()

    def log_iter(self) -> Iterator[LogRef]:
        log_map = self._dataset._log_map
        for token in self._record.log_tokens:
            yield LogRef(self._dataset, log_map[token])

    def path(self) -> Path:
        return self._dataset.dataset_dir / self._record.filename


class InstanceRef(RecordRef[IndexedInstance]):
    __slots__ = ()

    def category(self) -> CategoryRef:
        return CategoryRef(self._dataset, self._dataset._category_map[self._record.category_token])

    def annotation_iter(self) -> Iterator["SampleAnnotationRef"]:
        annotation_map = self._dataset._sample_annotation_map
        for token in self._record.annotation_tokens:
            yield SampleAnnotationRef(self._dataset, annotation_map[token])

    def first_annotation(self) -> "SampleAnnotationRef":
        return SampleAnnotationRef(
            self._dataset,
            self._dataset._sample_annotation_map[self._record.first_annotation_token],
        )

    def last_annotation(self) -> "SampleAnnotationRef":
        return SampleAnnotationRef(
            self._dataset,
            self._dataset._sample_annotation_map[self._record.last_annotation_token],
        )


class SceneRef(RecordRef[IndexedScene]):
    __slots__ = ()

    def log(self) -> LogRef:
        return LogRef(self._dataset, self._dataset._log_map[self._record.log_token])

    def sample_iter(self) -> Iterator["SampleRef"]:
        """Samples in chain order"""
        sample_map = self._dataset._sample_map
        for token in self._record.sample_tokens:
            yield SampleRef(self._dataset, sample_map[token])

    def first_sample(self) -> "SampleRef":
        return SampleRef(self._dataset, self._dataset._sample_map[self._record.first_sample_token])

    def last_sample(self) -> "SampleRef":
        return SampleRef(self._dataset, self._dataset._sample_map[self._record.last_sample_token])


class SampleRef(RecordRef[IndexedSample]):
    __slots__ = ()

    def scene(self) -> SceneRef:
        return SceneRef(self._dataset, self._dataset._scene_map[self._record.scene_token])

    def prev(self) -> Optional["SampleRef"]:
        if self._record.prev is None:
            return None
        return SampleRef(self._dataset, self._dataset._sample_map[self._record.prev])

    def next(self) -> Optional["SampleRef"]:
        if self._record.next is None:
            return None
        return SampleRef(self._dataset, self._dataset._sample_map[self._record.next])

    def annotation_iter(self) -> Iterator["SampleAnnotationRef"]:
        annotation_map = self._dataset._sample_annotation_map
        for token in self._record.annotation_tokens:
            yield SampleAnnotationRef(self._dataset, annotation_map[token])

    def sample_data_iter(self) -> Iterator["SampleDataRef"]:
        sample_data_map = self._dataset._sample_data_map
        for token in self._record.sample_data_tokens:
            yield SampleDataRef(self._dataset, sample_data_map[token])


class SampleAnnotationRef(RecordRef[SampleAnnotationModel]):
    __slots__ = ()

    def sample(self) -> SampleRef:
        return SampleRef(self._dataset, self._dataset._sample_map[self._record.sample_token])

    def instance(self) -> InstanceRef:
        return InstanceRef(self._dataset, self._dataset._instance_map[self._record.instance_token])

    def attribute_iter(self) -> Iterator[AttributeRef]:
        attribute_map = self._dataset._attribute_map
        for token in self._record.attribute_tokens:
            yield AttributeRef(self._dataset, attribute_map[token])

    def visibility(self) -> Optional[VisibilityRef]:
        if self._record.visibility_token is None:
            return None
        return VisibilityRef(
            self._dataset, self._dataset._visibility_map[self._record.visibility_token]
        )

    def prev(self) -> Optional["SampleAnnotationRef"]:
        if self._record.prev is None:
            return None
        return SampleAnnotationRef(
            self._dataset, self._dataset._sample_annotation_map[self._record.prev]
        )

    def next(self) -> Optional["SampleAnnotationRef"]:
        if self._record.next is None:
            return None
        return SampleAnnotationRef(
            self._dataset, self._dataset._sample_annotation_map[self._record.next]
        )


class SampleDataRef(RecordRef[SampleDataModel]):
    __slots__ = ()

    def sample(self) -> SampleRef:
        return SampleRef(self._dataset, self._dataset._sample_map[self._record.sample_token])

    def ego_pose(self) -> EgoPoseRef:
        return EgoPoseRef(self._dataset, self._dataset._ego_pose_map[self._record.ego_pose_token])

    def calibrated_sensor(self) -> CalibratedSensorRef:
        return CalibratedSensorRef(
            self._dataset,
            self._dataset._calibrated_sensor_map[self._record.calibrated_sensor_token],
        )

    def prev(self) -> Optional["SampleDataRef"]:
        if self._record.prev is None:
            return None
        return SampleDataRef(self._dataset, self._dataset._sample_data_map[self._record.prev])

    def next(self) -> Optional["SampleDataRef"]:
        if self._record.next is None:
            return None
        return SampleDataRef(self._dataset, self._dataset._sample_data_map[self._record.next])

    def path(self) -> Path:
        return self._dataset.dataset_dir / self._record.filename
