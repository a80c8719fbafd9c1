"""Template file helpers for SPARQLGen.

This module copies the packaged configuration templates into a target
directory. It is a thin wrapper around importlib.resources and shutil,
used by `sparqlgen.create_config` and the `--template` CLI flag.
"""

from __future__ import annotations

from importlib import resources
from pathlib import Path
import logging
import shutil

from sparqlgen.errors import ConfigurationError

logger = logging.getLogger(__name__)

_TEMPLATE_NAMES = {
    "json": "sparqlgen_config.json",
    "yml": "sparqlgen_config.yml",
    "yaml": "sparqlgen_config.yml",
}


def create_config(*, config_format: str = "json", output_dir: Path | None = None) -> Path:
    """Copy the packaged configuration template of `config_format` into `output_dir`.

    Args:
        config_format: One of "json", "yml", "yaml".
        output_dir: Destination directory; the current working directory
            when None. Created if missing.

    Returns:
        Path to the created configuration file.

    Raises:
        ConfigurationError: If `config_format` is not supported.
    """
    template_name = _TEMPLATE_NAMES.get(config_format.lower().lstrip("."))
    if template_name is None:
        message = f"Unsupported config format {config_format!r}. Expected json, yml or yaml."
        raise ConfigurationError(message)

    src = resources.files("sparqlgen") / "resources" / "templates" / template_name
    destination_dir = output_dir if output_dir is not None else Path.cwd()
    destination_dir.mkdir(parents=True, exist_ok=True)
    dst = destination_dir / template_name

    with resources.as_file(src) as template_path:
        shutil.copy(str(template_path), dst)
    logger.info("Created configuration file at: %s", dst)
    return dst
