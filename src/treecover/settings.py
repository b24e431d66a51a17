import logging
import pathlib
import typing
from collections.abc import Mapping

import pydantic
import yaml
from pydantic import Field

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_FILE = pathlib.Path(".treecover.yaml")

MODEL_CONFIG = pydantic.ConfigDict(
    # don't accept unknown keys
    extra="forbid",
    # all fields are immutable
    frozen=True,
    # read inline doc strings
    use_attribute_docstrings=True,
)


def _before_ignore(v: typing.Any) -> typing.Any:
    if isinstance(v, str):
        return v.split(",")
    return v


IgnoreList = typing.Annotated[
    list[str],
    pydantic.BeforeValidator(_before_ignore),
]


class SettingsFile(pydantic.BaseModel):
    """Models the optional settings file `.treecover.yaml`

    ::

      covermode: atomic
      ignore:
        - .git
        - vendor
        - build/output
      short: true
      go: /usr/local/go/bin/go
    """

    model_config = MODEL_CONFIG

    covermode: typing.Literal["set", "count", "atomic"] = "count"
    """Coverage mode passed to go test"""

    ignore: IgnoreList | None = None
    """Directories to prune, relative to the traversal root"""

    short: bool = False
    """Tell long-running tests to shorten their run time"""

    go: str = Field(default="go", min_length=1)
    """go binary"""

    @classmethod
    def from_string(
        cls,
        raw_yaml: str,
        *,
        source: pathlib.Path | str | None = None,
    ) -> "SettingsFile":
        """Load from raw yaml string"""
        parsed: typing.Any = yaml.safe_load(raw_yaml)
        if parsed is None:
            # empty file
            parsed = {}
        elif not isinstance(parsed, Mapping):
            raise TypeError(f"invalid yaml, not a dict (source: {source!r}): {parsed}")
        try:
            return cls(**parsed)
        except Exception as err:
            raise RuntimeError(
                f"failed to load settings (source: {source!r}): {err}"
            ) from err

    @classmethod
    def from_file(cls, filename: pathlib.Path) -> "SettingsFile":
        """Load from file

        Raises :exc:`FileNotFound` when the file is not found.
        """
        filename = filename.absolute()
        logger.info("loading settings from %s", filename)
        raw_yaml = filename.read_text(encoding="utf-8")
        return cls.from_string(raw_yaml, source=filename)


def load(settings_file: pathlib.Path) -> SettingsFile:
    """Load the settings file, falling back to defaults when it is missing"""
    if settings_file.is_file():
        return SettingsFile.from_file(settings_file)
    logger.debug("settings file %s does not exist, ignoring", settings_file.absolute())
    return SettingsFile()
