import logging
import os
from dataclasses import dataclass, fields, replace

logger = logging.getLogger(__name__)

ENV_PREFIX = "FILEPREVIEW_"


@dataclass(frozen=True)
class PreviewSettings:
    """
    Runtime knobs of the preview service.

    Every field can be overridden through an environment variable named
    ``FILEPREVIEW_<FIELD_NAME>`` (upper case), see ``from_env``.
    """

    cache_ttl_seconds: float = 60 * 60
    fetch_timeout_seconds: float = 30.0
    max_file_size_bytes: int = 50 * 1024 * 1024  # 50 MiB
    log_level: str = "INFO"
    stream_url_prefix: str = "/api/filePreview/stream/"

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "PreviewSettings":
        environ = os.environ if environ is None else environ
        settings = cls()
        overrides = {}
        for item in fields(cls):
            raw = environ.get(ENV_PREFIX + item.name.upper())
            if raw is None or raw.strip() == "":
                continue
            current = getattr(settings, item.name)
            try:
                overrides[item.name] = type(current)(raw.strip())
            except ValueError:
                logger.warning(
                    "Ignoring invalid value [%s] for setting [%s]", raw, item.name
                )
        return replace(settings, **overrides)

    def resolved_log_level(self) -> int:
        level = logging.getLevelName(self.log_level.upper())
        return level if isinstance(level, int) else logging.INFO
