"""
Dataset loading pipeline: read tables, check integrity, build indices
"""
import logging
from pathlib import Path
from typing import Optional, Union

from .config import LoaderConfig
from .dataset import Dataset
from .exceptions import NuScenesDataError
from .indexer import build_dataset
from .integrity import check_integrity
from .tables import load_tables
from .utils import time_block

logger = logging.getLogger(__name__)


class DatasetLoader:
    """Loads one dataset version from disk.

    The loader keeps no state between calls: every ``load`` returns an
    independent ``Dataset``.
    """

    def __init__(self, config: Optional[LoaderConfig] = None):
        self.config = config or LoaderConfig()

    def load(self, version: str, dataset_dir: Union[str, Path]) -> Dataset:
        """Load ``<dataset_dir>/<version>``.

        Raises:
            DatasetIOError: a table file is missing or unreadable
            MalformedInputError: a table file does not decode
            CorruptedDatasetError: the tables violate a dataset invariant
        """
        dataset_dir = Path(dataset_dir)
        meta_dir = dataset_dir / version
        max_workers = self.config.max_workers
        logger.info(f"Loading nuScenes {version} from {dataset_dir} (check={self.config.check})")

        try:
            with time_block(logger, "Reading tables", logging.INFO):
                tables = load_tables(meta_dir, max_workers=max_workers)

            if self.config.check:
                with time_block(logger, "Integrity check", logging.INFO):
                    check_integrity(tables, max_workers=max_workers)
            else:
                logger.debug("Integrity check skipped")

            with time_block(logger, "Indexing", logging.INFO):
                dataset = build_dataset(tables, version, dataset_dir, max_workers=max_workers)
        except NuScenesDataError as e:
            logger.error(f"Failed to load nuScenes {version} from {dataset_dir}: {e}")
            raise

        logger.info(
            f"Loaded nuScenes {version}: {dataset.count('scene')} scenes, "
            f"{dataset.count('sample')} samples, {dataset.count('sample_data')} sample data"
        )
        return dataset


def load(
    version: str,
    dataset_dir: Union[str, Path],
    check: bool = True,
    max_workers: Optional[int] = None,
) -> Dataset:
    """Load a dataset version with a one-off ``DatasetLoader``"""
    return DatasetLoader(LoaderConfig(check=check, max_workers=max_workers)).load(version, dataset_dir)
