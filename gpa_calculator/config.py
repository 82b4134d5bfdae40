import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from gpa_calculator.grade_scale import DEFAULT_SCALE_NAME, GradeScale, get_scale

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    grade_scale: str = DEFAULT_SCALE_NAME
    data_dir: str = ".gpa_data"
    log_level: str = "INFO"

    @property
    def scale(self) -> GradeScale:
        return get_scale(self.grade_scale)


def load_settings(environ: Optional[Mapping[str, str]] = None, env_file: str = ".env") -> Settings:
    """
    Read settings from the environment once at startup.

    GPA_GRADE_SCALE  uds | us          (default uds)
    GPA_DATA_DIR     course CSV folder (default .gpa_data)
    GPA_LOG_LEVEL    logging level     (default INFO)

    Values from env_file fill in anything the process environment leaves
    unset. An explicit environ mapping skips both.
    """
    if environ is None:
        load_dotenv(env_file, override=False)
    env = os.environ if environ is None else environ

    scale_name = env.get("GPA_GRADE_SCALE", DEFAULT_SCALE_NAME).strip().lower()
    get_scale(scale_name)

    log_level = env.get("GPA_LOG_LEVEL", "INFO").strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ValueError(f"Unknown log level {log_level!r}.")

    return Settings(
        grade_scale=scale_name,
        data_dir=env.get("GPA_DATA_DIR", ".gpa_data"),
        log_level=log_level,
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
