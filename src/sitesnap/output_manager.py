"""Output manager for the per-phase screenshot directories and run logs."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from sitesnap.config import OutputLayout
from sitesnap.models import SessionPhase

logger = logging.getLogger(__name__)


class OutputSinkError(Exception):
    """Raised when a phase's output directory or log file cannot be created."""


@dataclass
class PhaseOutputs:
    """Where one phase writes its screenshots and run log."""

    phase: SessionPhase
    screenshots_dir: Path
    log_path: Path


class OutputManager:
    """Lays out crawl outputs under a base directory.

    Example structure:
        <base>/
        ├── screenshots_public/
        │   ├── example.com.png
        │   └── example.com_about.png
        ├── screenshot_log_public.csv
        ├── screenshots_authenticated/
        ├── screenshot_log_authenticated.csv
        └── debug_screenshots/
            └── login_failure.png
    """

    def __init__(self, base_output_dir: Path = Path("."), layout: Optional[OutputLayout] = None):
        """Initialize output manager.

        Args:
            base_output_dir: Base directory for all crawl outputs
            layout: File and directory names per phase
        """
        self.base_output_dir = Path(base_output_dir)
        self.layout = layout or OutputLayout()

    def prepare_phase(self, phase: SessionPhase) -> PhaseOutputs:
        """Create the phase's screenshot directory.

        The log file itself is created by the run log when the phase starts.

        Args:
            phase: Phase to prepare

        Returns:
            PhaseOutputs for the phase

        Raises:
            OutputSinkError: If the directory cannot be created
        """
        screenshots_dir = self.base_output_dir / self.layout.screenshots_dir_for(phase)
        log_path = self.base_output_dir / self.layout.log_file_for(phase)

        try:
            screenshots_dir.mkdir(parents=True, exist_ok=True)
            log_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputSinkError(f"Cannot create output directory {screenshots_dir}: {e}") from e

        logger.debug(f"Prepared {phase.value} outputs in {screenshots_dir}")
        return PhaseOutputs(phase=phase, screenshots_dir=screenshots_dir, log_path=log_path)

    def debug_dir(self) -> Path:
        """Diagnostic directory path (not created until something is written)."""
        return self.base_output_dir / self.layout.debug_dir
