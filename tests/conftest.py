import copy
import hashlib
import json
from pathlib import Path

import pytest

VERSION = "v1.0-mini"

INTRINSIC = [[1266.4, 0.0, 816.3], [0.0, 1266.4, 491.5], [0.0, 0.0, 1.0]]


def tok(name: str) -> str:
    return hashlib.md5(name.encode()).hexdigest()


def build_tables():
    """One log, one scene with two samples, one instance tracked over both"""
    return {
        "attribute": [
            {"token": tok("att-moving"), "name": "vehicle.moving", "description": "moving"},
        ],
        "calibrated_sensor": [
            {
                "token": tok("cs-lidar"),
                "sensor_token": tok("sensor-lidar"),
                "translation": [0.94, 0.0, 1.84],
                "rotation": [0.7071, 0.0, 0.0, 0.7071],
                "camera_intrinsic": [],
            },
            {
                "token": tok("cs-cam"),
                "sensor_token": tok("sensor-cam"),
                "translation": [1.70, 0.01, 1.51],
                "rotation": [0.5, -0.5, 0.5, -0.5],
                "camera_intrinsic": INTRINSIC,
            },
        ],
        "category": [
            {"token": tok("cat-car"), "name": "vehicle.car", "description": "cars"},
        ],
        "ego_pose": [
            {
                "token": tok("ep-2"),
                "timestamp": 1532402928147847,
                "rotation": [1.0, 0.0, 0.0, 0.0],
                "translation": [411.5, 1180.0, 0.0],
            },
            {
                "token": tok("ep-1"),
                "timestamp": 1532402927647951,
                "rotation": [1.0, 0.0, 0.0, 0.0],
                "translation": [411.3, 1180.8, 0.0],
            },
            {
                "token": tok("ep-cam"),
                "timestamp": 1532402927612460,
                "rotation": [1.0, 0.0, 0.0, 0.0],
                "translation": [411.3, 1180.9, 0.0],
            },
        ],
        "instance": [
            {
                "token": tok("inst-1"),
                "category_token": tok("cat-car"),
                "nbr_annotations": 2,
                "first_annotation_token": tok("ann-1"),
                "last_annotation_token": tok("ann-2"),
            },
        ],
        "log": [
            {
                "token": tok("log-1"),
                "logfile": "n015-2018-07-24-11-22-45+0800",
                "vehicle": "n015",
                "date_captured": "2018-07-24",
                "location": "singapore-onenorth",
            },
        ],
        "map": [
            {
                "token": tok("map-1"),
                "log_tokens": [tok("log-1")],
                "category": "semantic_prior",
                "filename": "maps/onenorth.png",
            },
        ],
        "sample": [
            {
                "token": tok("sample-2"),
                "timestamp": 1532402928147847,
                "scene_token": tok("scene-1"),
                "prev": tok("sample-1"),
                "next": "",
            },
            {
                "token": tok("sample-1"),
                "timestamp": 1532402927647951,
                "scene_token": tok("scene-1"),
                "prev": "",
                "next": tok("sample-2"),
            },
        ],
        "sample_annotation": [
            {
                "token": tok("ann-1"),
                "sample_token": tok("sample-1"),
                "instance_token": tok("inst-1"),
                "attribute_tokens": [tok("att-moving")],
                "visibility_token": "4",
                "translation": [373.2, 1130.4, 0.8],
                "size": [0.62, 0.67, 1.64],
                "rotation": [0.9831, 0.0, 0.0, -0.1827],
                "num_lidar_pts": 12,
                "num_radar_pts": 0,
                "prev": "",
                "next": tok("ann-2"),
            },
            {
                "token": tok("ann-2"),
                "sample_token": tok("sample-2"),
                "instance_token": tok("inst-1"),
                "attribute_tokens": [],
                "visibility_token": "",
                "translation": [373.4, 1130.5, 0.8],
                "size": [0.62, 0.67, 1.64],
                "rotation": [0.9831, 0.0, 0.0, -0.1827],
                "num_lidar_pts": 9,
                "num_radar_pts": 1,
                "prev": tok("ann-1"),
                "next": "",
            },
        ],
        "sample_data": [
            {
                "token": tok("sd-lidar-1"),
                "sample_token": tok("sample-1"),
                "ego_pose_token": tok("ep-1"),
                "calibrated_sensor_token": tok("cs-lidar"),
                "timestamp": 1532402927647951,
                "fileformat": "pcd",
                "is_key_frame": True,
                "height": 0,
                "width": 0,
                "filename": "samples/LIDAR_TOP/sweep-1.pcd.bin",
                "prev": "",
                "next": tok("sd-lidar-2"),
            },
            {
                "token": tok("sd-lidar-2"),
                "sample_token": tok("sample-2"),
                "ego_pose_token": tok("ep-2"),
                "calibrated_sensor_token": tok("cs-lidar"),
                "timestamp": 1532402928147847,
                "fileformat": "pcd",
                "is_key_frame": True,
                "height": 0,
                "width": 0,
                "filename": "samples/LIDAR_TOP/sweep-2.pcd.bin",
                "prev": tok("sd-lidar-1"),
                "next": "",
            },
            {
                "token": tok("sd-cam-1"),
                "sample_token": tok("sample-1"),
                "ego_pose_token": tok("ep-cam"),
                "calibrated_sensor_token": tok("cs-cam"),
                "timestamp": 1532402927612460,
                "fileformat": "jpg",
                "is_key_frame": True,
                "height": 900,
                "width": 1600,
                "filename": "samples/CAM_FRONT/frame-1.jpg",
                "prev": "",
                "next": "",
            },
        ],
        "scene": [
            {
                "token": tok("scene-1"),
                "name": "scene-0061",
                "description": "Parked truck, construction",
                "log_token": tok("log-1"),
                "nbr_samples": 2,
                "first_sample_token": tok("sample-1"),
                "last_sample_token": tok("sample-2"),
            },
        ],
        "sensor": [
            {"token": tok("sensor-lidar"), "channel": "LIDAR_TOP", "modality": "lidar"},
            {"token": tok("sensor-cam"), "channel": "CAM_FRONT", "modality": "camera"},
        ],
        "visibility": [
            {"token": "1", "level": "v0-40", "description": "visibility of whole object is between 0 and 40%"},
            {"token": "4", "level": "v80-100", "description": "visibility of whole object is between 80 and 100%"},
        ],
    }


def write_tables(dataset_dir: Path, tables, version: str = VERSION) -> Path:
    meta_dir = Path(dataset_dir) / version
    meta_dir.mkdir(parents=True, exist_ok=True)
    for name, records in tables.items():
        with open(meta_dir / f"{name}.json", "w") as f:
            json.dump(records, f)
    return Path(dataset_dir)


def find(tables, table: str, name: str) -> dict:
    token = tok(name)
    return next(record for record in tables[table] if record["token"] == token)


@pytest.fixture
def tables():
    return copy.deepcopy(build_tables())


@pytest.fixture
def dataset_dir(tmp_path, tables):
    return write_tables(tmp_path, tables)


@pytest.fixture
def dataset(dataset_dir):
    from nuscenes_data import load

    return load(VERSION, dataset_dir)
