"""Evaluation archive persistence.

Generations are collected in an ``EvaluationArchive`` owned by the driver and
written to disk only when the driver flushes it. Archive files are JSON lists
of ``PopulationStats`` records.

Loading, recalculation and the "best trees" query read whole folders of such
files. I/O and format problems surface as ``PersistenceError`` so the driver
can report them without interrupting evolution.
"""

import json
import logging
import random
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence, Union

from pydantic import TypeAdapter, ValidationError

from grove.config.evolution import BEST_TREE_COUNT
from grove.exceptions import PersistenceError
from grove.records import LSystemRecord, PopulationStats, stats_to_json_list
from grove.util.rng import require_rng_param

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

ARCHIVE_SUFFIX = ".json"

_stats_list = TypeAdapter(List[PopulationStats])


class EvaluationArchive:
    """Accumulates generation records until the driver flushes them."""

    def __init__(self) -> None:
        self._pending: List[PopulationStats] = []

    def add(self, stats: PopulationStats) -> None:
        self._pending.append(stats)
        logger.debug(
            "Queued generation %d (%d trees) for saving", stats.gen_number, len(stats.lsystems_data)
        )

    @property
    def pending(self) -> List[PopulationStats]:
        return list(self._pending)

    def __len__(self) -> int:
        return len(self._pending)

    def clear(self) -> None:
        self._pending = []

    def flush(
        self,
        directory: PathLike,
        filename: Optional[str] = None,
        rng: Optional[random.Random] = None,
    ) -> Path:
        """Write every queued generation to one file and empty the queue.

        Args:
            directory: Folder to write into; created if missing
            filename: Optional file name; defaults to a timestamped name
            rng: Run RNG for the file name suffix; required without ``filename``

        Returns:
            Path of the written file

        Raises:
            PersistenceError: If the file cannot be written. The queue is kept
                so a later flush can retry.
        """
        if filename is None:
            filename = default_archive_filename(rng)
        path = Path(directory) / filename
        save_population_file(path, self._pending)
        logger.info("Saved %d generations to %s", len(self._pending), path)
        self.clear()
        return path


def default_archive_filename(rng: Optional[random.Random] = None) -> str:
    """``population_<day of year>_<timestamp>_<suffix>.json``

    The suffix is drawn from the run's RNG so a replayed run names its files
    the same way up to the timestamp.
    """
    rng = require_rng_param(rng, "default_archive_filename")
    now = datetime.now(timezone.utc)
    suffix = rng.randrange(16**6)
    return f"population_{now.timetuple().tm_yday}_{now.strftime('%H%M%S')}_{suffix:06x}{ARCHIVE_SUFFIX}"


def save_population_file(path: PathLike, stats: Sequence[PopulationStats]) -> Path:
    """Write a list of generation records as indented JSON."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(stats_to_json_list(stats), f, indent=2)
    except OSError as e:
        raise PersistenceError(f"Failed to write evaluation archive {path}: {e}") from e
    return path


def load_population_file(path: PathLike) -> List[PopulationStats]:
    """Read a list of generation records.

    Raises:
        PersistenceError: If the file is missing, unreadable, or malformed
    """
    path = Path(path)
    try:
        with open(path) as f:
            raw = json.load(f)
    except OSError as e:
        raise PersistenceError(f"Failed to read evaluation archive {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise PersistenceError(f"Evaluation archive {path} is not valid JSON: {e}") from e

    try:
        return _stats_list.validate_python(raw)
    except ValidationError as e:
        raise PersistenceError(f"Evaluation archive {path} has an invalid layout: {e}") from e


def archive_files(folder: PathLike) -> List[Path]:
    """Archive files in a folder, sorted by name.

    Raises:
        PersistenceError: If the folder does not exist
    """
    folder = Path(folder)
    if not folder.is_dir():
        raise PersistenceError(f"Evaluation folder not found: {folder}")
    return sorted(p for p in folder.iterdir() if p.is_file() and p.suffix == ARCHIVE_SUFFIX)


def recalculate_file(path: PathLike, output_dir: Optional[PathLike] = None) -> Path:
    """Recompute fitness for every tree in an archive file.

    Generations are renumbered by their position in the file. The result is
    written under the same file name, in ``output_dir`` when given,
    otherwise over the original.
    """
    path = Path(path)
    generations = load_population_file(path)
    recalculated = []
    for gen_number, stats in enumerate(generations):
        for record in stats.lsystems_data:
            logger.debug(
                "Recalculating tree %s from %s (%d symbols)",
                record.fitness.tree_name,
                path.name,
                len(record.sentence),
            )
        recalculated.append(stats.recalculated(gen_number=gen_number))

    target = Path(output_dir) / path.name if output_dir is not None else path
    save_population_file(target, recalculated)
    logger.info("Recalculated %d generations from %s into %s", len(recalculated), path, target)
    return target


def recalculate_folder(folder: PathLike, output_dir: Optional[PathLike] = None) -> List[Path]:
    """Recalculate every archive file in a folder."""
    return [recalculate_file(path, output_dir) for path in archive_files(folder)]


def load_all_records(folder: PathLike) -> List[LSystemRecord]:
    records: List[LSystemRecord] = []
    for path in archive_files(folder):
        for stats in load_population_file(path):
            records.extend(stats.lsystems_data)
    return records


def best_records(folder: PathLike, count: int = BEST_TREE_COUNT) -> List[LSystemRecord]:
    """The ``count`` archived trees with the highest overall fitness."""
    records = load_all_records(folder)
    records.sort(key=lambda r: r.fitness.overall_fitness, reverse=True)
    best = records[:count]
    for record in best:
        logger.info(
            "Tree %s: phototropism %.4f, branching %.4f, symmetry %.4f, overall %.4f",
            record.fitness.tree_name,
            record.fitness.positive_phototropism,
            record.fitness.branching_points_proportion,
            record.fitness.bilateral_symmetry,
            record.fitness.overall_fitness,
        )
    return best


def best_sentences(folder: PathLike, count: int = BEST_TREE_COUNT) -> List[str]:
    return [record.sentence for record in best_records(folder, count)]
