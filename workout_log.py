import logging
import os
from datetime import datetime

import pandas as pd

logger = logging.getLogger(__name__)

COLUMNS = ["timestamp", "rep", "stage", "knee_left", "knee_right", "hip_left", "hip_right"]


class WorkoutLog:
    def __init__(self):
        self.entries = []

    def __len__(self):
        return len(self.entries)

    def record(self, payload, when=None):
        when = when or datetime.now()
        self.entries.append({
            'timestamp': when.isoformat(),
            'rep': payload.count,
            'stage': payload.stage,
            'knee_left': float(payload.knee_left),
            'knee_right': float(payload.knee_right),
            'hip_left': float(payload.hip_left),
            'hip_right': float(payload.hip_right),
        })

    def to_frame(self):
        return pd.DataFrame(self.entries, columns=COLUMNS)

    def save(self, directory, when=None):
        """Write the log as CSV into ``directory``. Returns the path, or None if empty."""
        if not self.entries:
            logger.info("No workout data to save.")
            return None
        when = when or datetime.now()
        os.makedirs(directory, exist_ok=True)
        fname = os.path.join(directory, f"workout_log_{when.strftime('%Y%m%d_%H%M%S')}.csv")
        self.to_frame().to_csv(fname, index=False)
        logger.info("Saved workout log to %s", fname)
        return fname
