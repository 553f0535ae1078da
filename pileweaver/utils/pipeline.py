"""
PileWeaver Correction Pipeline.

Coordinates a complete correction run:
- Loading: PAF alignments and the FASTA sequence store
- Correction: window-by-window pile correction of every aligned long read
- Output: corrected reads written to FASTA, plus a run summary

Reads without any alignment are left out of the output; reads with
alignments but no usable pile are written unchanged.
"""

from pathlib import Path
from typing import Any, Dict, List, Union
import logging
import time
from dataclasses import dataclass

from ..io import SeqRead, SequenceStore, read_paf, group_alignments_by_query, write_fasta
from ..read_correction import CorrectedRead, PileCorrector


@dataclass
class CorrectionSummary:
    """Statistics from a correction run."""
    reads_processed: int
    reads_corrected: int
    windows_total: int
    windows_linked: int
    bases_before: int
    bases_after: int
    elapsed_sec: float

    @property
    def windows_failed(self) -> int:
        return self.windows_total - self.windows_linked

    def summary(self) -> str:
        """Return human-readable summary."""
        return (
            f"Correction Summary:\n"
            f"  Reads: {self.reads_processed:,} processed, {self.reads_corrected:,} corrected\n"
            f"  Windows: {self.windows_linked:,}/{self.windows_total:,} linked "
            f"({self.windows_failed:,} kept as-is)\n"
            f"  Bases: {self.bases_before:,} → {self.bases_after:,}\n"
            f"  Time: {self.elapsed_sec:.1f}s"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'reads_processed': self.reads_processed,
            'reads_corrected': self.reads_corrected,
            'windows_total': self.windows_total,
            'windows_linked': self.windows_linked,
            'windows_failed': self.windows_failed,
            'bases_before': self.bases_before,
            'bases_after': self.bases_after,
            'elapsed_sec': self.elapsed_sec,
        }


class CorrectionPipeline:
    """
    End-to-end long-read correction from alignment piles.

    Manages:
    - Logging setup (file in the output directory + console)
    - Loading alignments and sequences
    - Per-read correction through PileCorrector
    - Writing corrected reads
    """

    def __init__(self, config: Dict[str, Any], output_dir: Union[str, Path]):
        """
        Initialize correction pipeline.

        Args:
            config: Pipeline configuration dictionary (see config.schema)
            output_dir: Directory for the log file and default outputs
        """
        self.config = config
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        # Setup logging
        log_level = getattr(logging, config['output']['logging']['level'])
        logging.basicConfig(
            level=log_level,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            handlers=[
                logging.FileHandler(self.output_dir / config['output']['logging']['log_file']),
                logging.StreamHandler()
            ]
        )
        self.logger = logging.getLogger(__name__)

        self.corrector = PileCorrector.from_config(config)

    def run(
        self,
        alignments_path: Union[str, Path],
        reads_paths: Union[str, Path, List[Union[str, Path]]],
        output_path: Union[str, Path],
    ) -> CorrectionSummary:
        """
        Correct every long read that has alignments.

        Args:
            alignments_path: PAF file (query = long read, target = support)
            reads_paths: FASTA file(s) holding long reads and supporting sequences
            output_path: Output FASTA of corrected reads

        Returns:
            CorrectionSummary
        """
        start = time.time()
        self.logger.info("=" * 60)
        self.logger.info("Starting PileWeaver correction")
        self.logger.info("=" * 60)

        if isinstance(reads_paths, (str, Path)):
            reads_paths = [reads_paths]

        sequences = SequenceStore.from_fasta(*reads_paths)
        groups = group_alignments_by_query(read_paf(alignments_path))
        self.logger.info("%d reads with alignments", len(groups))

        corrected: List[CorrectedRead] = []
        for i, (read_id, alignments) in enumerate(groups.items(), start=1):
            try:
                corrected.append(self.corrector.correct_read(read_id, alignments, sequences))
            except Exception as e:
                self.logger.error(f"Correction of {read_id} failed: {e}", exc_info=True)
                raise

            if i % 100 == 0:
                self.logger.info("  %d/%d reads processed", i, len(groups))

        written = write_fasta(
            (SeqRead(id=r.id, sequence=r.sequence) for r in corrected),
            output_path,
            line_width=self.config['output'].get('line_width', 80),
        )
        self.logger.info("Wrote %d reads to %s", written, output_path)

        summary = CorrectionSummary(
            reads_processed=len(corrected),
            reads_corrected=sum(1 for r in corrected if r.corrected),
            windows_total=sum(len(r.windows) for r in corrected),
            windows_linked=sum(r.linked_windows for r in corrected),
            bases_before=sum(len(sequences[r.id]) for r in corrected),
            bases_after=sum(len(r.sequence) for r in corrected),
            elapsed_sec=time.time() - start,
        )

        for line in summary.summary().splitlines():
            self.logger.info(line)

        return summary


__all__ = [
    "CorrectionSummary",
    "CorrectionPipeline",
]
