import copy
from pathlib import Path

import pytest

from nuscenes_data import (
    CategoryRef,
    SampleAnnotationRef,
    SampleDataRef,
    SampleRef,
    TableName,
    Token,
    TokenParseError,
    VisibilityToken,
)

from nuscenes_data.utils import fork_join

from conftest import tok


def test_lookup_by_token_and_text(dataset):
    by_text = dataset.sample(tok("sample-1"))
    by_token = dataset.sample(Token.from_str(tok("sample-1")))
    assert isinstance(by_text, SampleRef)
    assert by_text == by_token
    assert hash(by_text) == hash(by_token)


def test_lookup_unknown_token(dataset):
    assert dataset.sample(tok("ghost")) is None
    assert dataset.scene(tok("sample-1")) is None
    assert dataset.visibility(7) is None


def test_lookup_rejects_bad_text(dataset):
    with pytest.raises(TokenParseError):
        dataset.sample("sample-1")


def test_visibility_lookup(dataset):
    assert dataset.visibility(4).level.value == "v80-100"
    assert dataset.visibility("4") == dataset.visibility(VisibilityToken(4))


def test_counts(dataset):
    assert dataset.count(TableName.SAMPLE_DATA) == 3
    assert dataset.count("ego_pose") == 3
    assert dataset.count("visibility") == 2
    with pytest.raises(ValueError):
        dataset.count("lidarseg")


@pytest.mark.parametrize("table", list(TableName))
def test_every_table_iterates(dataset, table):
    handles = list(getattr(dataset, f"{table.value}_iter")())
    assert len(handles) == dataset.count(table)
    assert all(h.dataset() is dataset for h in handles)


def test_handle_delegates_record_fields(dataset):
    scene = dataset.scene(tok("scene-1"))
    assert scene.name == "scene-0061"
    assert scene.record.name == "scene-0061"
    assert scene.nbr_samples == 2
    with pytest.raises(AttributeError):
        scene.no_such_field


def test_handle_is_read_only(dataset):
    scene = dataset.scene(tok("scene-1"))
    with pytest.raises(AttributeError):
        scene.name = "renamed"


def test_scene_navigation(dataset):
    scene = dataset.scene(tok("scene-1"))
    assert scene.log().vehicle == "n015"
    assert scene.first_sample() == dataset.sample(tok("sample-1"))
    assert scene.last_sample() == dataset.sample(tok("sample-2"))


def test_sample_navigation(dataset):
    first = dataset.sample(tok("sample-1"))
    second = first.next()
    assert second.token == Token.from_str(tok("sample-2"))
    assert second.prev() == first
    assert first.prev() is None
    assert second.next() is None
    assert second.record.prev == first.token


def test_sample_children(dataset):
    sample = dataset.sample(tok("sample-1"))
    assert [str(a.token) for a in sample.annotation_iter()] == [tok("ann-1")]
    assert {str(d.token) for d in sample.sample_data_iter()} == {tok("sd-lidar-1"), tok("sd-cam-1")}


def test_annotation_navigation(dataset):
    annotation = dataset.sample_annotation(tok("ann-1"))
    assert isinstance(annotation, SampleAnnotationRef)
    assert annotation.sample() == dataset.sample(tok("sample-1"))
    assert annotation.instance().category().name == "vehicle.car"
    assert [a.name for a in annotation.attribute_iter()] == ["vehicle.moving"]
    assert annotation.visibility().token == VisibilityToken(4)
    assert annotation.next().visibility() is None
    assert annotation.next().prev() == annotation


def test_instance_navigation(dataset):
    instance = dataset.instance(tok("inst-1"))
    assert isinstance(instance.category(), CategoryRef)
    assert [str(a.token) for a in instance.annotation_iter()] == [tok("ann-1"), tok("ann-2")]
    assert instance.first_annotation().token == Token.from_str(tok("ann-1"))
    assert instance.last_annotation().token == Token.from_str(tok("ann-2"))


def test_sample_data_navigation(dataset, dataset_dir):
    data = dataset.sample_data(tok("sd-lidar-1"))
    assert isinstance(data, SampleDataRef)
    assert data.ego_pose().token == Token.from_str(tok("ep-1"))
    assert data.calibrated_sensor().sensor().channel.value == "LIDAR_TOP"
    assert data.next().prev() == data
    assert data.path() == dataset_dir / "samples/LIDAR_TOP/sweep-1.pcd.bin"


def test_log_and_map_paths(dataset, dataset_dir):
    log = dataset.log(tok("log-1"))
    assert log.logfile_path() == dataset_dir / "n015-2018-07-24-11-22-45+0800"
    map_ = dataset.map(tok("map-1"))
    assert [log_ref.token for log_ref in map_.log_iter()] == [log.token]
    assert map_.path() == Path(dataset_dir) / "maps" / "onenorth.png"


def test_chronological_iterators(dataset):
    assert [str(s.token) for s in dataset.sorted_sample_iter()] == [tok("sample-1"), tok("sample-2")]
    assert [str(d.token) for d in dataset.sorted_sample_data_iter()] == [
        tok("sd-cam-1"),
        tok("sd-lidar-1"),
        tok("sd-lidar-2"),
    ]
    assert [str(s.token) for s in dataset.sorted_scene_iter()] == [tok("scene-1")]
    assert [str(e.token) for e in dataset.sorted_ego_pose_iter()][0] == tok("ep-cam")


def test_navigation_is_idempotent(dataset):
    for data in dataset.sample_data_iter():
        assert data.token in {d.token for d in data.sample().sample_data_iter()}
    for sample in dataset.sample_iter():
        assert sample.token in {s.token for s in sample.scene().sample_iter()}


def test_referential_closure(dataset):
    for data in dataset.sample_data_iter():
        assert dataset.sample(data.sample_token) is not None
        assert dataset.ego_pose(data.ego_pose_token) is not None
        assert dataset.calibrated_sensor(data.calibrated_sensor_token) is not None
    for annotation in dataset.sample_annotation_iter():
        assert dataset.instance(annotation.instance_token) is not None
        for token in annotation.attribute_tokens:
            assert dataset.attribute(token) is not None
    for sensor in dataset.calibrated_sensor_iter():
        assert dataset.sensor(sensor.sensor_token) is not None
    for scene in dataset.scene_iter():
        assert dataset.log(scene.log_token) is not None
    for instance in dataset.instance_iter():
        assert dataset.category(instance.category_token) is not None


def test_chains_round_trip(dataset):
    for scene in dataset.scene_iter():
        walked = []
        sample = scene.first_sample()
        while sample is not None:
            walked.append(sample.token)
            sample = sample.next()
        assert tuple(walked) == scene.sample_tokens
        assert len(walked) == scene.nbr_samples
    for instance in dataset.instance_iter():
        walked = [a.token for a in instance.annotation_iter()]
        assert walked[0] == instance.first_annotation_token
        assert walked[-1] == instance.last_annotation_token
        assert len(walked) == instance.nbr_annotations


def test_dataset_is_read_only(dataset):
    with pytest.raises(TypeError):
        dataset._sample_map[Token.from_str(tok("ghost"))] = None


def test_handles_copy_as_themselves(dataset):
    scene = dataset.scene(tok("scene-1"))
    assert copy.copy(scene) is scene
    assert copy.deepcopy(scene) is scene
    assert copy.deepcopy([scene])[0] == scene


def walk_next(handle):
    tokens = []
    while handle is not None:
        tokens.append(handle.token)
        handle = handle.next()
    return tokens


def walk_prev(handle):
    tokens = []
    while handle is not None:
        tokens.append(handle.token)
        handle = handle.prev()
    return tokens


def test_annotation_chains_follow_links(dataset):
    for instance in dataset.instance_iter():
        walked = walk_next(instance.first_annotation())
        assert tuple(walked) == instance.annotation_tokens
        assert walk_prev(instance.last_annotation()) == walked[::-1]


def test_sample_data_chains_follow_links(dataset):
    heads = [d for d in dataset.sample_data_iter() if d.record.prev is None]
    assert len(heads) == 2
    covered = []
    for head in heads:
        forward = walk_next(head)
        tail = dataset.sample_data(forward[-1])
        assert tail.record.next is None
        assert walk_prev(tail) == forward[::-1]
        covered.extend(forward)
    assert sorted(covered) == sorted(d.token for d in dataset.sample_data_iter())


def test_concurrent_readers(dataset):
    def traverse():
        seen = []
        for scene in dataset.sorted_scene_iter():
            for sample in scene.sample_iter():
                for annotation in sample.annotation_iter():
                    seen.append(annotation.instance().category().name)
                for data in sample.sample_data_iter():
                    seen.append(data.calibrated_sensor().sensor().channel.value)
                    seen.append(str(data.sample().scene().token))
        return seen

    results = fork_join([traverse for _ in range(16)], max_workers=8)
    assert all(result == results[0] for result in results)
    assert len(results[0]) == 2 + 3 * 2
