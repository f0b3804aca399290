"""The directory layout of a demux run.

```
<output>/
  tmp/parquet/chunk_<index>.parquet
  data/qc/sample=<sample>/part-0.parquet
  data/counts/sample=<sample>/barcode1=<b1>/barcode2=<b2>/part-<index>.parquet
```

Copyright © 2024 Pixelgen Technologies AB.
"""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path

from uaspire.exceptions import TableIOError
from uaspire.types import PathType

logger = logging.getLogger(__name__)

CHUNK_INDEX_WIDTH = 9


@dataclasses.dataclass(frozen=True)
class OutputLayout:
    """Paths used by a demux run for one sample.

    :ivar root: the output root directory
    :ivar sample_name: the name of the sample
    """

    root: Path
    sample_name: str

    @classmethod
    def for_sample(cls, root: PathType, sample_name: str) -> "OutputLayout":
        """Create a layout rooted at `root`."""
        return cls(Path(root), sample_name)

    @property
    def chunk_dir(self) -> Path:
        """Return the directory with the transient per-chunk tables."""
        return self.root / "tmp" / "parquet"

    @property
    def qc_dir(self) -> Path:
        """Return the directory holding the QC summary of the sample."""
        return self.root / "data" / "qc" / f"sample={self.sample_name}"

    @property
    def qc_file(self) -> Path:
        """Return the QC summary file."""
        return self.qc_dir / "part-0.parquet"

    @property
    def counts_dir(self) -> Path:
        """Return the directory holding the RBS counts of the sample."""
        return self.root / "data" / "counts" / f"sample={self.sample_name}"

    @property
    def report_file(self) -> Path:
        """Return the JSON sample report file."""
        return self.root / f"{self.sample_name}.report.json"

    @property
    def parameters_file(self) -> Path:
        """Return the JSON file with the command line parameters."""
        return self.root / f"{self.sample_name}.meta.json"

    def chunk_file(self, index: int) -> Path:
        """Return the path of the table exported for chunk `index`."""
        return self.chunk_dir / f"chunk_{index:0{CHUNK_INDEX_WIDTH}d}.parquet"

    def partition_dir(self, barcode1: str, barcode2: str) -> Path:
        """Return the directory of the counts of one barcode pair."""
        return self.counts_dir / f"barcode1={barcode1}" / f"barcode2={barcode2}"

    def create(self) -> None:
        """Create all directories of the layout.

        Existing directories are reused and their contents left in place.

        :raises TableIOError: if a directory cannot be created
        """
        for path in (self.root, self.chunk_dir, self.qc_dir, self.counts_dir):
            try:
                path.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise TableIOError("directory creation", path, str(exc)) from exc
        logger.debug("Created output directories under %s", self.root)
