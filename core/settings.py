import json
import logging
import os

from utils.convolution import resolve_workers

logger = logging.getLogger(__name__)


class Settings:
    """Manage filter settings

    kernel_size: neighborhood extent of both filter stages (odd, >= 3)
    sigma: Gaussian spread
    workers: row bands per filter pass, null for available parallelism
    mode: "parallel" or "sequential" (sequential forces one worker)
    """

    DEFAULT_SETTINGS = {
        'kernel_size': 5,
        'sigma': 1.5,
        'workers': None,
        'mode': 'parallel',
    }
    MODES = ('parallel', 'sequential')

    def __init__(self, settings_file=None):
        if settings_file is None:
            home = os.path.expanduser("~")
            self.settings_file = os.path.join(home, '.grayfilter_settings.json')
        else:
            self.settings_file = settings_file

        self.settings = self.DEFAULT_SETTINGS.copy()
        self.load()

    def load(self):
        """Load settings from file"""
        if os.path.exists(self.settings_file):
            try:
                with open(self.settings_file, 'r', encoding='utf-8') as f:
                    loaded = json.load(f)
            except (OSError, ValueError) as e:
                logger.warning("Failed to load settings from %s: %s", self.settings_file, e)
                return
            if not isinstance(loaded, dict):
                logger.warning("Ignoring settings file %s: expected a JSON object", self.settings_file)
                return
            self.settings.update(loaded)

    def save(self):
        """Save settings to file"""
        try:
            with open(self.settings_file, 'w', encoding='utf-8') as f:
                json.dump(self.settings, f, indent=2)
        except OSError as e:
            logger.warning("Failed to save settings to %s: %s", self.settings_file, e)

    def get(self, key, default=None):
        """Get a setting value"""
        return self.settings.get(key, default)

    def set(self, key, value):
        """Set a setting value"""
        self.settings[key] = value
        self.save()

    def update(self, **overrides):
        """Apply overrides for this run only; ``None`` values are ignored."""
        for key, value in overrides.items():
            if value is not None:
                self.settings[key] = value

    def worker_count(self) -> int:
        mode = self.settings.get('mode', 'parallel')
        if mode not in self.MODES:
            raise ValueError(f"Unknown mode: {mode}")
        if mode == 'sequential':
            return 1
        return resolve_workers(self.settings.get('workers'))
