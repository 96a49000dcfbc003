# tiling_tools/Settings.py
import configparser
import logging
import os

CONFIG_PATH = 'config.ini'
SECTION = 'Settings'

DEFAULT_CONFIG = {
    'deflations': 5,
    'initial_size': 100.0,
    'tiling_type': 0.0,
    'curvature': 0.5,
    'tile_scale': 40.0,
    'samples_per_edge': 8,
    'room_width': 400.0,
    'room_height': 200.0,
    'room_depth': 600.0,
    'color_mode': 'identity',
}

INT_KEYS = ('deflations', 'samples_per_edge')
FLOAT_KEYS = ('initial_size', 'tiling_type', 'curvature', 'tile_scale',
              'room_width', 'room_height', 'room_depth')

logger = logging.getLogger('Settings')


class Settings:
    """Reads and writes the [Settings] section of config.ini."""

    def __init__(self):
        self.config = configparser.ConfigParser()

    def write_config_file(self, config_path, **values):
        """Write a complete configuration, filling gaps from DEFAULT_CONFIG."""
        settings = dict(DEFAULT_CONFIG)
        settings.update(values)
        self.config[SECTION] = {key: str(value) for key, value in settings.items()}
        with open(config_path, 'w') as configfile:
            self.config.write(configfile)

    def read_config_file(self, config_path):
        """Typed settings; keys missing from the file take their defaults."""
        self.config.read(config_path)
        section = self.config[SECTION] if self.config.has_section(SECTION) else {}
        settings = dict(DEFAULT_CONFIG)
        for key in section:
            if key in INT_KEYS:
                settings[key] = self.config.getint(SECTION, key)
            elif key in FLOAT_KEYS:
                settings[key] = self.config.getfloat(SECTION, key)
            elif key in DEFAULT_CONFIG:
                settings[key] = section[key].strip()
            else:
                logger.warning(f"Ignoring unknown setting {key!r} in {config_path}")
        return settings

    def update_config_file(self, config_path, **kwargs):
        self.config.read(config_path)
        if not self.config.has_section(SECTION):
            self.config.add_section(SECTION)
        for key, value in kwargs.items():
            self.config.set(SECTION, key, str(value))
        with open(config_path, 'w') as configfile:
            self.config.write(configfile)


def initialize_config(path=CONFIG_PATH):
    """Create config.ini from defaults when missing, then read it."""
    settings = Settings()
    if not os.path.isfile(path):
        logger.info(f"Config file {path} not found. Creating a new one...")
        settings.write_config_file(path)
    return settings.read_config_file(path)
