"""
Pipeline configuration.

Loads settings from a YAML file and applies environment variable
overrides. Database credentials are read by the connection pool itself.
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from src.utils.validation import MAX_SAMPLE_LIMIT, sanitize_sql_identifier

DEFAULT_CONFIG_PATH = "config/pipeline.yaml"

# Environment variable -> config field
ENV_OVERRIDES = {
    "PIPELINE_INPUT_PATH": "input_path",
    "PIPELINE_DELIMITER": "delimiter",
    "PIPELINE_TABLE_NAME": "table_name",
    "PIPELINE_SAMPLE_LIMIT": "sample_limit",
}


class PipelineConfig(BaseModel):
    """
    Settings for one pipeline run.

    Attributes:
        input_path: CSV file to load
        delimiter: Field delimiter of the input
        table_name: Destination table
        sample_limit: Rows read back after loading
        clear_before_load: Drop the table before loading (full replace)
        connect_timeout: Seconds to wait for a database connection
        statement_timeout: Seconds a single SQL statement may run
    """

    input_path: str = "dataset/filmtv_movies.csv"
    delimiter: str = Field(default=",", min_length=1, max_length=1)
    table_name: str = "movie"
    sample_limit: int = Field(default=2, gt=0, le=MAX_SAMPLE_LIMIT)
    clear_before_load: bool = True
    connect_timeout: float = Field(default=30.0, gt=0)
    statement_timeout: float = Field(default=60.0, gt=0)

    @field_validator("table_name")
    @classmethod
    def table_name_is_identifier(cls, v: str) -> str:
        return sanitize_sql_identifier(v, "table_name")


def load_config(config_path: str | Path | None = None) -> PipelineConfig:
    """
    Build the pipeline configuration.

    Args:
        config_path: YAML file; when None, config/pipeline.yaml is used if present

    Returns:
        PipelineConfig with environment overrides applied

    Raises:
        FileNotFoundError: If an explicit config_path does not exist
        ValueError: If the file is not valid YAML or not a mapping
    """
    values: dict[str, Any] = {}

    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Pipeline configuration file not found: {config_path}")
    else:
        path = Path(DEFAULT_CONFIG_PATH)

    if path.exists():
        with open(path) as f:
            try:
                loaded = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in configuration file {path}: {e}") from e
        if not isinstance(loaded, dict):
            raise ValueError(f"Configuration file {path} must contain a mapping")
        values.update(loaded.get("pipeline", loaded))

    for env_var, field_name in ENV_OVERRIDES.items():
        value = os.getenv(env_var)
        if value:
            values[field_name] = value

    return PipelineConfig(**values)
