"""Derived indices over the validated tables.

The indexer walks the scene and instance chains once, checks them against
the counts and endpoints their parents declare, groups annotations and
sample data by sample, and sorts the time-stamped tables. The result is the
immutable ``Dataset``.
"""
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .dataset import Dataset
from .exceptions import CorruptedDatasetError, InternalBugError
from .models import (
    IndexedInstance,
    IndexedSample,
    IndexedScene,
    InstanceModel,
    SampleModel,
    SceneModel,
    Token,
)
from .tables import RawTables
from .utils import fork_join, parallel_map

logger = logging.getLogger(__name__)


def group_by_sample(
    records: Mapping[Token, Any], samples: Mapping[Token, Any], table: str
) -> Dict[Token, List[Token]]:
    """Map each sample token to the tokens of the records pointing at it"""
    groups: Dict[Token, List[Token]] = {}
    for token, record in records.items():
        if record.sample_token not in samples:
            raise CorruptedDatasetError(
                f"the {table} {token} refers to sample {record.sample_token} that does not exist",
                {"rule": "dangling_foreign_key", "table": table, "token": str(token)},
            )
        groups.setdefault(record.sample_token, []).append(token)
    return groups


def walk_chain(
    first_token: Token,
    records: Mapping[Token, Any],
    table: str,
    owner_table: str,
    owner_token: Token,
) -> List[Token]:
    """Follow ``next`` links from ``first_token`` and return the tokens in chain order"""
    tokens: List[Token] = []
    seen = set()
    prev_token: Optional[Token] = None
    token: Optional[Token] = first_token

    while token is not None:
        if token in seen:
            raise CorruptedDatasetError(
                f"the {table} chain of {owner_table} {owner_token} loops back to {token}",
                {"rule": "chain_cycle", "table": owner_table, "token": str(owner_token)},
            )
        record = records.get(token)
        if record is None:
            if prev_token is None:
                message = (
                    f"the {owner_table} with token {owner_token} points to "
                    f"first token {token} that does not exist"
                )
            else:
                message = (
                    f"the {table} with token {prev_token} points to "
                    f"next token {token} that does not exist"
                )
            raise CorruptedDatasetError(
                message, {"rule": "broken_chain", "table": owner_table, "token": str(owner_token)}
            )
        if record.prev != prev_token:
            raise CorruptedDatasetError(
                f"the prev field is not correct in {table} with token {token}",
                {"rule": "chain_edge_mismatch", "table": table, "token": str(token)},
            )
        seen.add(token)
        tokens.append(token)
        prev_token = token
        token = record.next

    return tokens


def _check_declared_chain(
    tokens: Sequence[Token],
    declared_count: int,
    declared_last: Token,
    owner_table: str,
    owner_token: Token,
    count_field: str,
    last_field: str,
) -> None:
    if len(tokens) != declared_count:
        raise CorruptedDatasetError(
            f"the {owner_table} with token {owner_token} assures {count_field} = "
            f"{declared_count}, but in fact {len(tokens)}",
            {"rule": "chain_length_mismatch", "table": owner_table, "token": str(owner_token)},
        )
    if tokens[-1] != declared_last:
        raise CorruptedDatasetError(
            f"the {owner_table} with token {owner_token} assures {last_field} = "
            f"{declared_last}, but in fact {tokens[-1]}",
            {"rule": "chain_endpoint_mismatch", "table": owner_table, "token": str(owner_token)},
        )


def materialize_scene(scene: SceneModel, samples: Mapping[Token, SampleModel]) -> IndexedScene:
    sample_tokens = walk_chain(scene.first_sample_token, samples, "sample", "scene", scene.token)
    _check_declared_chain(
        sample_tokens, scene.nbr_samples, scene.last_sample_token,
        "scene", scene.token, "nbr_samples", "last_sample_token",
    )
    for token in sample_tokens:
        if samples[token].scene_token != scene.token:
            raise CorruptedDatasetError(
                f"the sample {token} is chained into scene {scene.token}, "
                f"but refers to scene {samples[token].scene_token}",
                {"rule": "chain_owner_mismatch", "table": "sample", "token": str(token)},
            )
    return IndexedScene.from_raw(scene, sample_tokens)


def materialize_instance(
    instance: InstanceModel, annotations: Mapping[Token, Any]
) -> IndexedInstance:
    annotation_tokens = walk_chain(
        instance.first_annotation_token, annotations, "sample_annotation", "instance", instance.token
    )
    _check_declared_chain(
        annotation_tokens, instance.nbr_annotations, instance.last_annotation_token,
        "instance", instance.token, "nbr_annotations", "last_annotation_token",
    )
    for token in annotation_tokens:
        if annotations[token].instance_token != instance.token:
            raise CorruptedDatasetError(
                f"the sample_annotation {token} is chained into instance {instance.token}, "
                f"but refers to instance {annotations[token].instance_token}",
                {"rule": "chain_owner_mismatch", "table": "sample_annotation", "token": str(token)},
            )
    return IndexedInstance.from_raw(instance, annotation_tokens)


def _check_coverage(
    chains: Sequence[Tuple[Token, ...]], records: Mapping[Token, Any], table: str, owner_table: str
) -> None:
    covered = sum(len(chain) for chain in chains)
    if covered == len(records):
        return
    reachable = {token for chain in chains for token in chain}
    orphan = next(token for token in records if token not in reachable)
    raise CorruptedDatasetError(
        f"the {table} {orphan} is not reachable from any {owner_table} chain",
        {"rule": "orphan_chain_member", "table": table, "token": str(orphan)},
    )


def sort_by_timestamp(records: Mapping[Token, Any]) -> Tuple[Token, ...]:
    return tuple(sorted(records, key=lambda token: records[token].timestamp))


def sort_scenes(
    scenes: Mapping[Token, IndexedScene], samples: Mapping[Token, IndexedSample]
) -> Tuple[Token, ...]:
    """Order scenes by the earliest timestamp among their samples"""

    def _first_timestamp(scene_token: Token):
        sample_tokens = scenes[scene_token].sample_tokens
        if not sample_tokens:
            raise InternalBugError(f"the scene {scene_token} has an empty sample chain")
        try:
            return min(samples[token].timestamp for token in sample_tokens)
        except KeyError as e:
            raise InternalBugError(
                f"the scene {scene_token} lists sample {e.args[0]} missing from the index"
            ) from e

    return tuple(sorted(scenes, key=_first_timestamp))


def build_dataset(
    tables: RawTables,
    version: str,
    dataset_dir: Path,
    max_workers: Optional[int] = None,
) -> Dataset:
    """Consume raw tables and produce the immutable dataset"""
    annotation_groups, sample_data_groups = fork_join(
        [
            lambda: group_by_sample(tables.sample_annotation, tables.sample, "sample_annotation"),
            lambda: group_by_sample(tables.sample_data, tables.sample, "sample_data"),
        ],
        max_workers=max_workers,
    )

    scene_list = parallel_map(
        lambda scene: materialize_scene(scene, tables.sample),
        list(tables.scene.values()),
        max_workers=max_workers,
    )
    instance_list = parallel_map(
        lambda instance: materialize_instance(instance, tables.sample_annotation),
        list(tables.instance.values()),
        max_workers=max_workers,
    )
    _check_coverage([s.sample_tokens for s in scene_list], tables.sample, "sample", "scene")
    _check_coverage(
        [i.annotation_tokens for i in instance_list],
        tables.sample_annotation,
        "sample_annotation",
        "instance",
    )

    scene_map = {scene.token: scene for scene in scene_list}
    instance_map = {instance.token: instance for instance in instance_list}
    sample_map = {
        token: IndexedSample.from_raw(
            sample,
            annotation_groups.get(token, ()),
            sample_data_groups.get(token, ()),
        )
        for token, sample in tables.sample.items()
    }

    sorted_ego_pose_tokens, sorted_sample_tokens, sorted_sample_data_tokens, sorted_scene_tokens = (
        fork_join(
            [
                lambda: sort_by_timestamp(tables.ego_pose),
                lambda: sort_by_timestamp(sample_map),
                lambda: sort_by_timestamp(tables.sample_data),
                lambda: sort_scenes(scene_map, sample_map),
            ],
            max_workers=max_workers,
        )
    )
    logger.debug(
        f"Indexed {len(scene_map)} scenes, {len(sample_map)} samples, "
        f"{len(instance_map)} instances"
    )

    return Dataset(
        version=version,
        dataset_dir=dataset_dir,
        attribute_map=tables.attribute,
        calibrated_sensor_map=tables.calibrated_sensor,
        category_map=tables.category,
        ego_pose_map=tables.ego_pose,
        instance_map=instance_map,
        log_map=tables.log,
        map_map=tables.map,
        sample_map=sample_map,
        sample_annotation_map=tables.sample_annotation,
        sample_data_map=tables.sample_data,
        scene_map=scene_map,
        sensor_map=tables.sensor,
        visibility_map=tables.visibility,
        sorted_ego_pose_tokens=sorted_ego_pose_tokens,
        sorted_sample_tokens=sorted_sample_tokens,
        sorted_sample_data_tokens=sorted_sample_data_tokens,
        sorted_scene_tokens=sorted_scene_tokens,
    )
