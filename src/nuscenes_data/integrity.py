"""Cross-table integrity checks over the raw tables.

Every foreign key must resolve in its target table, and the ``prev``/``next``
fields of each chained table must agree with each other. Chain agreement is
proven as equality of two edge sets rather than by walking each chain, so the
check does not depend on any ordering of the records.
"""
import logging
from typing import Any, Callable, Hashable, List, Mapping, Optional, Tuple

from .exceptions import CorruptedDatasetError
from .models import Token
from .tables import RawTables
from .utils import fork_join

logger = logging.getLogger(__name__)

Edge = Tuple[Token, Token]


def _require(
    token: Optional[Hashable],
    target: Mapping,
    target_name: str,
    owner_table: str,
    owner_token: Hashable,
    field: str,
) -> None:
    if token is None or token in target:
        return
    raise CorruptedDatasetError(
        f"the token {token} in field {field} of {owner_table} {owner_token} "
        f"does not refer to any {target_name}",
        {
            "rule": "dangling_foreign_key",
            "table": owner_table,
            "token": str(owner_token),
            "field": field,
            "target": target_name,
            "missing": str(token),
        },
    )


def check_calibrated_sensors(tables: RawTables) -> None:
    for token, calibrated_sensor in tables.calibrated_sensor.items():
        _require(calibrated_sensor.sensor_token, tables.sensor, "sensor",
                 "calibrated_sensor", token, "sensor_token")


def check_maps(tables: RawTables) -> None:
    for token, map_ in tables.map.items():
        for log_token in map_.log_tokens:
            _require(log_token, tables.log, "log", "map", token, "log_tokens")


def check_instances(tables: RawTables) -> None:
    annotations = tables.sample_annotation
    for token, instance in tables.instance.items():
        _require(instance.first_annotation_token, annotations, "sample annotation",
                 "instance", token, "first_annotation_token")
        _require(instance.last_annotation_token, annotations, "sample annotation",
                 "instance", token, "last_annotation_token")
        _require(instance.category_token, tables.category, "category",
                 "instance", token, "category_token")


def check_scenes(tables: RawTables) -> None:
    for token, scene in tables.scene.items():
        _require(scene.log_token, tables.log, "log", "scene", token, "log_token")
        _require(scene.first_sample_token, tables.sample, "sample",
                 "scene", token, "first_sample_token")
        _require(scene.last_sample_token, tables.sample, "sample",
                 "scene", token, "last_sample_token")


def check_samples(tables: RawTables) -> None:
    for token, sample in tables.sample.items():
        _require(sample.scene_token, tables.scene, "scene", "sample", token, "scene_token")
        _require(sample.prev, tables.sample, "sample", "sample", token, "prev")
        _require(sample.next, tables.sample, "sample", "sample", token, "next")


def check_sample_annotations(tables: RawTables) -> None:
    annotations = tables.sample_annotation
    for token, annotation in annotations.items():
        _require(annotation.sample_token, tables.sample, "sample",
                 "sample_annotation", token, "sample_token")
        _require(annotation.instance_token, tables.instance, "instance",
                 "sample_annotation", token, "instance_token")
        for attribute_token in annotation.attribute_tokens:
            _require(attribute_token, tables.attribute, "attribute",
                     "sample_annotation", token, "attribute_tokens")
        _require(annotation.visibility_token, tables.visibility, "visibility",
                 "sample_annotation", token, "visibility_token")
        _require(annotation.prev, annotations, "sample annotation",
                 "sample_annotation", token, "prev")
        _require(annotation.next, annotations, "sample annotation",
                 "sample_annotation", token, "next")


def check_sample_data(tables: RawTables) -> None:
    sample_data = tables.sample_data
    for token, data in sample_data.items():
        _require(data.sample_token, tables.sample, "sample", "sample_data", token, "sample_token")
        _require(data.ego_pose_token, tables.ego_pose, "ego pose",
                 "sample_data", token, "ego_pose_token")
        _require(data.calibrated_sensor_token, tables.calibrated_sensor, "calibrated sensor",
                 "sample_data", token, "calibrated_sensor_token")
        _require(data.prev, sample_data, "sample data", "sample_data", token, "prev")
        _require(data.next, sample_data, "sample data", "sample_data", token, "next")


def chain_edges(records: Mapping[Token, Any]) -> Tuple[List[Edge], List[Edge]]:
    """Sorted ``(predecessor, successor)`` edges declared by prev and by next fields"""
    prev_edges = sorted((r.prev, token) for token, r in records.items() if r.prev is not None)
    next_edges = sorted((token, r.next) for token, r in records.items() if r.next is not None)
    return prev_edges, next_edges


def check_chain_symmetry(records: Mapping[Token, Any], table: str) -> None:
    prev_edges, next_edges = chain_edges(records)
    if prev_edges == next_edges:
        return

    only_prev = sorted(set(prev_edges) - set(next_edges))
    only_next = sorted(set(next_edges) - set(prev_edges))
    if only_prev:
        before, after = only_prev[0]
        message = (
            f"the {table} {after} declares prev = {before}, "
            f"but {before} does not declare next = {after}"
        )
    else:
        before, after = only_next[0]
        message = (
            f"the {table} {before} declares next = {after}, "
            f"but {after} does not declare prev = {before}"
        )
    raise CorruptedDatasetError(
        message,
        {
            "rule": "chain_edge_mismatch",
            "table": table,
            "edge": [str(before), str(after)],
            "prev_only": len(only_prev),
            "next_only": len(only_next),
        },
    )


def integrity_checks(tables: RawTables) -> List[Tuple[str, Callable[[], None]]]:
    return [
        ("calibrated_sensor", lambda: check_calibrated_sensors(tables)),
        ("map", lambda: check_maps(tables)),
        ("instance", lambda: check_instances(tables)),
        ("scene", lambda: check_scenes(tables)),
        ("sample", lambda: check_samples(tables)),
        ("sample_annotation", lambda: check_sample_annotations(tables)),
        ("sample_data", lambda: check_sample_data(tables)),
        ("sample chain", lambda: check_chain_symmetry(tables.sample, "sample")),
        ("sample_annotation chain",
         lambda: check_chain_symmetry(tables.sample_annotation, "sample_annotation")),
        ("sample_data chain",
         lambda: check_chain_symmetry(tables.sample_data, "sample_data")),
    ]


def check_integrity(tables: RawTables, max_workers: Optional[int] = None) -> None:
    """Run every check concurrently; the first violation is raised"""

    def _run(name: str, check: Callable[[], None]) -> None:
        check()
        logger.debug(f"Integrity check passed: {name}")

    fork_join(
        [lambda name=name, check=check: _run(name, check) for name, check in integrity_checks(tables)],
        max_workers=max_workers,
    )
