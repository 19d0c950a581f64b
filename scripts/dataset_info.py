"""Load a dataset version and print a summary of what it contains"""
import logging
from collections import Counter

from rich import progress

from nuscenes_data import LoaderConfig, NuScenesDataError, TableName, load

logger = logging.getLogger(__name__)


def summarize(dataset):
    sensor_counts = Counter()
    annotation_count = 0
    for scene in progress.track(list(dataset.sorted_scene_iter()), description="Walking scenes"):
        for sample in scene.sample_iter():
            annotation_count += sum(1 for _ in sample.annotation_iter())
            for data in sample.sample_data_iter():
                sensor_counts[data.calibrated_sensor().sensor().channel.value] += 1

    print(f"nuScenes {dataset.version} at {dataset.dataset_dir}")
    for table in TableName:
        print(f"  {table.value:<20} {dataset.count(table):>10}")
    print(f"  annotations reached through scenes: {annotation_count}")
    for channel, count in sorted(sensor_counts.items()):
        print(f"  {channel:<20} {count:>10} sample data")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Summarize a nuScenes dataset version.")
    parser.add_argument("version", help="Version directory name, e.g. v1.0-mini")
    parser.add_argument("dataset_dir", help="Directory holding the version directory")
    parser.add_argument("--no-check", action="store_true", help="Skip the integrity check")
    parser.add_argument("--max-workers", type=int, default=None, help="Thread pool width")

    args = parser.parse_args()
    config = LoaderConfig.from_env()
    logging.basicConfig(level=config.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        dataset = load(
            args.version,
            args.dataset_dir,
            check=config.check and not args.no_check,
            max_workers=args.max_workers or config.max_workers,
        )
    except NuScenesDataError as e:
        logger.error(f"Dataset unusable: {e}")
        raise SystemExit(1)
    summarize(dataset)
